"""
Utility helpers.
"""

from src.course_quiz_generator.utils.env_loader import load_env

__all__ = ["load_env"]
