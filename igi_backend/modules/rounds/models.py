# Supabase table: rounds
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

rounds:
- id: uuid (primary key)
- name: text (not null)
- status: text - 'pending' | 'active' | 'completed' (default: 'pending')
- description: text (nullable)
- start_time: timestamp (nullable)
- end_time: timestamp (nullable)
- Flag: integer (default: 0) - 1 unlocks the round for teams
- timer: integer (nullable) - round duration in seconds
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
