"""Configuration settings for the ProxyNode feedback pipeline."""

import os
import re
from pathlib import Path
from re import Pattern

from dotenv import load_dotenv

load_dotenv()

# Model configuration
MODEL_CONFIG: dict[str, str | float | int] = {
    "model_id": os.getenv("PROXYNODE_MODEL_ID", "SmolLM2 360M Q8_0"),
    "ollama_url": os.getenv("PROXYNODE_OLLAMA_URL", "http://localhost:11434"),
    "temperature": 0.1,
    "max_tokens": 256,
    "generation_timeout": float(os.getenv("PROXYNODE_GENERATION_TIMEOUT", "30.0")),
    "request_timeout": float(os.getenv("PROXYNODE_REQUEST_TIMEOUT", "600.0")),
}

# Logical model identifiers and the backend tags they resolve to
MODEL_REGISTRY: dict[str, str] = {
    "SmolLM2 360M Q8_0": "smollm2:360m",
}

# Persistence (None selects the in-memory store)
DATABASE_URL: str | None = os.getenv("PROXYNODE_DATABASE_URL")

# Device identity
DEVICE_ID_PATH = Path(
    os.getenv("PROXYNODE_DEVICE_ID_PATH", str(Path.home() / ".proxynode" / "device_id"))
)

# Bounded pool for blocking store calls
WORKER_POOL_SIZE = int(os.getenv("PROXYNODE_WORKERS", "4"))

# PII detection patterns, in precedence order for overlapping matches
EMAIL_PATTERN: Pattern = re.compile(
    r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"
)
PHONE_PATTERN: Pattern = re.compile(r"\b\d{10}\b")
ID_NUMBER_PATTERN: Pattern = re.compile(r"\b\d{6,}\b")
PERSON_NAME_PATTERN: Pattern = re.compile(r"\b[A-Z][a-z]+ [A-Z][a-z]+\b")

# Keyword lists for rule-based classification
ACADEMIC_KEYWORDS = [
    "teacher",
    "professor",
    "course",
    "exam",
    "study",
    "class",
    "subject",
    "lecture",
    "assignment",
    "grade",
    "syllabus",
]

INFRASTRUCTURE_KEYWORDS = [
    "building",
    "room",
    "wifi",
    "internet",
    "lab",
    "library",
    "hostel",
    "canteen",
    "facility",
    "maintenance",
    "equipment",
]

PLACEMENT_KEYWORDS = [
    "job",
    "placement",
    "internship",
    "company",
    "interview",
    "career",
    "recruitment",
    "industry",
    "skill",
]

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = os.getenv("PROXYNODE_LOG_LEVEL", "INFO")
