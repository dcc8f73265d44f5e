"""
Quiz Session Errors

Every failure raised by the quiz core is local and recoverable: the
session is left unchanged and the caller may retry or correct the call.
"""


class QuizSessionError(Exception):
    """Base error for quiz session operations."""
    
    code = "quiz-session-error"
    
    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidTransitionError(QuizSessionError):
    """Operation attempted outside the state where it is valid."""
    
    code = "invalid-transition"
    
    def __init__(self, operation: str, state: str):
        super().__init__(f"Cannot {operation} while session is {state}")
        self.operation = operation
        self.state = state


class UnknownQuestionError(QuizSessionError):
    """Operation referenced a question id absent from the session."""
    
    code = "unknown-question-reference"
    
    def __init__(self, question_id: str):
        super().__init__(f"Question {question_id!r} is not part of this session")
        self.question_id = question_id


class EmptyQuestionSetError(QuizSessionError):
    """A session cannot begin without questions."""
    
    code = "empty-question-set"
    
    def __init__(self):
        super().__init__("A quiz needs at least one question")


class InvalidQuestionSetError(QuizSessionError):
    """Question set is structurally unusable (duplicate ids, missing choices)."""
    
    code = "invalid-question-set"
