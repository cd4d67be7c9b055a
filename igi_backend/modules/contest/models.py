# Supabase tables: submissions_round1, submissions_round2
# Team score columns are documented in modules/teams/models.py
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

submissions_round1:
- id: uuid (primary key)
- team_id: text (foreign key -> teams.team_id)
- score: integer (nullable) - total for the round, 0-100
- feedback: text (nullable)
- submitted_at: timestamp (default: now())
- created_at / updated_at: timestamp

submissions_round2:
- id: uuid (primary key)
- team_id: text (foreign key -> teams.team_id)
- total_score: integer (nullable) - 0-100
- bug_results: jsonb (nullable) - per-question debugging evaluations
- submitted_at: timestamp (default: now())
- created_at / updated_at: timestamp

Round 3 answers are not stored; only the best score per question is kept on the team
(round3_<n>_score / round3_<n>_timestamp).
"""
