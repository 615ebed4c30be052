"""EduQuiz rewards service."""
