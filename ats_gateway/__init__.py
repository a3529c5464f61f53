"""ATS Gateway: resume/job-description matching backend and client."""

__version__ = "0.1.0"
