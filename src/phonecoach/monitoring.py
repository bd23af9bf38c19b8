"""Monitoring configuration for the pronunciation coach."""
from prometheus_client import Counter, Gauge, start_http_server

# Proficiency metrics
observations_ingested = Counter(
    "phonecoach_observations_ingested_total",
    "Total number of phoneme observations applied to proficiency scores",
)

proficiency_records = Gauge(
    "phonecoach_proficiency_records",
    "Number of phonemes currently tracked by the proficiency store",
)

# Scheduling metrics
phrases_served = Counter(
    "phonecoach_phrases_served_total",
    "Total number of practice phrases handed to the learner",
)

queue_refills = Counter(
    "phonecoach_queue_refills_total",
    "Total number of queue population runs",
    ["strategy"],
)

fallback_selections = Counter(
    "phonecoach_fallback_selections_total",
    "Total number of population runs that fell back to random phrases",
)

queue_length = Gauge(
    "phonecoach_queue_length",
    "Number of phrases currently waiting in the practice queue",
)

# Persistence metrics
persistence_errors = Counter(
    "phonecoach_persistence_errors_total",
    "Total number of failed proficiency reads or writes",
    ["error_kind"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
