"""
Utility functions module.

Time Semantics:
- All engine timestamps are timezone-aware UTC datetimes
- Cooldowns are measured on the scheduler clock, never on tick timestamps
- Local display time (e-mail) is derived at render time only
"""
