"""Constants used throughout the ProxyNode feedback pipeline."""

# Anonymization placeholders
PERSON_PLACEHOLDER = "[STUDENT]"
ID_PLACEHOLDER = "[ID]"
PHONE_PLACEHOLDER = "[PHONE]"
EMAIL_PLACEHOLDER = "[EMAIL]"

# Summary limits (characters)
SUMMARY_MAX_LENGTH = 100
SUMMARY_MIN_SENTENCE_LENGTH = 10
SUMMARY_TRUNCATE_LENGTH = 97
ELLIPSIS = "..."

# Sentence terminators used by extractive summarization
SENTENCE_TERMINATORS = ".!?"

# Stage names
STAGE_ANONYMIZE = "anonymize"
STAGE_SUMMARIZE = "summarize"
STAGE_CLASSIFY = "classify"
STAGES = (STAGE_ANONYMIZE, STAGE_SUMMARIZE, STAGE_CLASSIFY)

# Stage path markers
PATH_AI = "ai"
PATH_FALLBACK = "fallback"

# Feedback used to seed an empty installation
SAMPLE_FEEDBACK = [
    "The teaching quality in computer science department needs improvement",
    "WiFi connectivity in the library is very poor and affects our studies",
    "More companies should visit our campus for placement opportunities",
    "The lab equipment is outdated and needs immediate replacement",
    "Faculty should provide more practical examples during lectures",
    "Hostel food quality is below average and unhygienic",
    "Career counseling sessions are not frequent enough",
    "Air conditioning in classrooms doesn't work properly",
]

# Batch submission
DEFAULT_BATCH_CONCURRENCY = 4

# Display
SEPARATOR_LENGTH = 80
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
