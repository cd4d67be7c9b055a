# Supabase tables: telecast, telecast_viewers
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

telecast:
- id: uuid (primary key)
- active: boolean (default: false) - at most one active row at a time
- triggered_at: timestamp (nullable)
- timestamp: bigint (nullable) - trigger time in epoch milliseconds
- video_path: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

telecast_viewers:
- id: uuid (primary key)
- team_id: text (foreign key -> teams.team_id)
- viewed_at: timestamp (default: now())
- created_at: timestamp (default: now())
"""
