"""Database schema for athletes and sessions."""

SCHEMA = """
-- One row per athlete with their current thresholds
CREATE TABLE IF NOT EXISTS athletes (
    athlete_id TEXT PRIMARY KEY,
    name TEXT,
    ftp REAL,               -- watts
    lthr REAL,              -- bpm
    threshold_pace REAL,    -- running threshold speed, m/s
    css REAL,               -- critical swim speed, m/s
    max_hr REAL,
    resting_hr REAL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- Completed sessions with their cached TSS
CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    athlete_id TEXT NOT NULL,
    date TEXT NOT NULL,     -- ISO calendar day
    sport TEXT NOT NULL,
    name TEXT,
    duration_seconds REAL NOT NULL,
    avg_heart_rate REAL,
    avg_power REAL,
    normalized_power REAL,
    avg_speed REAL,
    distance REAL,
    tss REAL,
    tss_method TEXT,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (athlete_id) REFERENCES athletes(athlete_id)
);

CREATE INDEX IF NOT EXISTS idx_sessions_athlete_date ON sessions(athlete_id, date);
CREATE INDEX IF NOT EXISTS idx_sessions_athlete_sport ON sessions(athlete_id, sport, date);
"""
