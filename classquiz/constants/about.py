"""Static metadata describing ClassQuiz."""

APP_NAME = "ClassQuiz"
APP_VERSION = "0.1.0"
APP_ABOUT_TEXT = (
    "ClassQuiz is a classroom quiz backend simulated on top of a local key-value store. "
    "Organizations register, teachers author classes and quizzes, and students join with a code."
)
