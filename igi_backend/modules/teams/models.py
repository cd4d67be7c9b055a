# Supabase table: teams
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

teams:
- team_id: text (primary key) - TEAM-<base36 timestamp>-<4 chars>
- team_name: text (unique, not null) - always ends with the login suffix (@igifosscit)
- player1_name: text (not null)
- player2_name: text (not null)
- phone_no: text (not null)
- password: text (not null) - IGI-025, IGI-029, ... handed out once at creation
- r1_score: integer (default: 0)
- r1_submission_time: timestamp (nullable) - set once; a second round 1 submission is rejected
- r2_score: integer (default: 0)
- r2_submission_time: timestamp (nullable)
- round3_1_score / round3_2_score / round3_3_score: numeric (nullable)
- round3_1_timestamp / round3_2_timestamp / round3_3_timestamp: timestamp (nullable)
- rank: integer (nullable) - maintained by the calculate_team_ranks() database function
- created_at: timestamp (default: now())

calculate_team_ranks(): SQL function recomputing teams.rank from the round scores,
called by trigger on score updates and manually via POST /api/teams/admin/recalculate-ranks.
"""
