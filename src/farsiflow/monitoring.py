"""Monitoring configuration for FarsiFlow."""
from prometheus_client import Counter, Histogram, start_http_server

# Account metrics
accounts_created = Counter(
    "farsiflow_accounts_created_total",
    "Total number of learner accounts created",
)

sessions_resumed = Counter(
    "farsiflow_sessions_resumed_total",
    "Total number of session resumes (logins and app loads)",
)

# Progression metrics
stages_completed = Counter(
    "farsiflow_stages_completed_total",
    "Total number of practice stages completed",
    ["level_id"],
)

levels_unlocked = Counter(
    "farsiflow_levels_unlocked_total",
    "Total number of levels unlocked by finishing stage 10",
)

xp_awarded = Counter(
    "farsiflow_xp_awarded_total",
    "Total experience points awarded",
)

stage_xp = Histogram(
    "farsiflow_stage_xp",
    "Experience points earned per completed stage",
    buckets=[0, 20, 40, 60, 80, 100],
)

words_added = Counter(
    "farsiflow_words_added_total",
    "Total number of words added to vocabulary ledgers",
)

# Streak metrics
streak_transitions = Counter(
    "farsiflow_streak_transitions_total",
    "Streak reconciliation outcomes",
    ["outcome"],  # unchanged, incremented, reset
)

# Database metrics
db_errors = Counter(
    "farsiflow_db_errors_total",
    "Total number of database errors",
    ["operation"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
