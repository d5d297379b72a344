"""Web panel helpers: token auth, jobs, logs, redaction, control profiles and JSON payloads."""