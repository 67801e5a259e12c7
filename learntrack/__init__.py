"""learntrack - learner progress tracking API."""

__version__ = "0.1.0"
