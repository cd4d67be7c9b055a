# Read-only views over submissions_round1 / submissions_round2
# Table layouts are documented in modules/contest/models.py
