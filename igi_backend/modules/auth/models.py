# Sessions are held in process memory (igi_backend/core/sessions.py)
# Team credentials live in the teams table, see modules/teams/models.py

"""
Session user (returned by /api/auth/login, /commander-login and /session):
- email: text - commander email, or the team name (<name>@igifosscit)
- role: text - 'admin' | 'team'
- team_id: text (nullable) - set for team sessions
- display_name: text

Clients send the returned sessionId back in the X-Session-Id header.
"""
