"""Operational scripts: `python -m scripts.init_db`, `python -m scripts.send_reminders`."""
