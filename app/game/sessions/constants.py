QUESTION_CORRECT = 100
QUESTION_WRONG = 0

QUESTION_CORRECTNESS_VALUES = frozenset({QUESTION_WRONG, QUESTION_CORRECT})

GAME_NAME_MAX_LENGTH = 128
