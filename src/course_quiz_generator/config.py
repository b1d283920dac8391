"""
Configuration file for the Course Quiz Generator.

Modify these values to customize extraction, generation, consolidation
and attempt policy behavior. Every service accepts constructor overrides
that default to the values below.
"""

# Model Configuration
MODEL_NAME = "gemini-2.5-flash"
GENERATION_TEMPERATURE = 0.4
GENERATION_MAX_OUTPUT_TOKENS = 1024

# Retry / Pacing (seconds)
MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 2.0
CHUNK_PACING_SECONDS = 1.0

# Directories
FILES_DIR = "files"
UPLOADS_DIR = "uploads"
BLOBS_DIR = "blobs"
TEMP_DIR = "temp"
OUTPUT_DIR = "output"
QUIZZES_FILE = "quizzes.json"
ATTEMPTS_FILE = "attempts.json"
COURSES_FILE = "courses.json"

# Extraction Settings
MIN_EXTRACTED_CHARS = 100
PROMPT_CHUNK_CHARS = 2000

# Chunking Settings (word counts)
MIN_CHUNK_SIZE = 800
TARGET_CHUNK_SIZE = 1200
MAX_CHUNK_SIZE = 1500

# Consolidation Settings
SIMILARITY_THRESHOLD = 0.75
MIN_QUALITY_SCORE = 0.6
TARGET_DISTRIBUTION = {
    "mcq": 15,
    "short_answer": 10,
    "conceptual": 5,
}
POINTS_BY_TYPE = {
    "mcq": 1,
    "short_answer": 2,
    "conceptual": 3,
}
MIN_FINAL_QUESTIONS = 15

# Quiz Document Settings
FINAL_QUIZ_WEEK_NUMBER = 0
QUIZ_TITLE = "Course Completion Quiz"
QUIZ_TOPIC = "Comprehensive Assessment"
QUIZ_TIME_LIMIT_MINUTES = 45
QUIZ_CREATED_BY = "AI_System"
DEFAULT_DIFFICULTY = "Medium"

# Material Discovery
MATERIAL_CONTENT_TYPES = ("pdf", "notes")
ASSIGNMENT_CONTENT_TYPE = "assignment"

# Attempt Policy
MAX_ATTEMPTS = 5
BLOCK_DURATION_DAYS = 30
PASSING_PERCENTAGE = 70
COURSE_READY_STATUS = "Completed"

# System Instruction
SYSTEM_INSTRUCTION = """You are an expert exam question generator.
Generate questions strictly from the provided course content."""

# Default Prompt Template
DEFAULT_PROMPT_TEMPLATE = """You are an academic quiz generator. Based strictly on the following course material, generate quiz questions.

RULES:
- Use ONLY the provided content
- Do not invent topics outside the text
- Avoid duplicate questions
- Keep academic clarity

Generate exactly:
- 3 multiple choice questions (MCQ) with 4 options each
- 2 short answer questions
- 1 conceptual question

Output Format (STRICTLY FOLLOW):

MCQ:
Q1: [Question text]
A) [Option A]
B) [Option B]
C) [Option C]
D) [Option D]
CORRECT: [A/B/C/D]

SHORT:
Q1: [Question text]
ANSWER: [Expected answer]

CONCEPTUAL:
Q1: [Question text]
ANSWER: [Expected answer/key points]

COURSE MATERIAL:
{chunk_text}

BEGIN GENERATION:"""
