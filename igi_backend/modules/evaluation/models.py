# Supabase tables: evaluation, ai_jobs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

evaluation:
- queue_id: uuid (primary key)
- team_id: text (foreign key -> teams.team_id)
- round: text - 'round1' | 'round2' | 'round3'
- question_id: text - e.g. 'r1-q3'
- raw_answer: text
- status: text - 'pending' | 'processing' | 'completed' | 'failed'
- score: numeric (nullable) - 0-10
- feedback: text (nullable)
- submission_time: timestamp (default: now())
- retry_count: integer (default: 0)
- max_retries: integer (default: 3)
- last_error: text (nullable)
- next_retry_at: timestamp (nullable)
- created_at / updated_at: timestamp

ai_jobs:
- id: uuid (primary key)
- type: text - 'evaluation'
- round: text (nullable)
- status: text - 'pending' | 'running' | 'completed' | 'failed'
- progress: integer (nullable) - 0-100
- error: text (nullable)
- created_at / updated_at: timestamp
"""
