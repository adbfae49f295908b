"""
Task subsystem.

Components:
- task_models.py: data structures (CheckinTask)
- task_queue.py: in-memory min-priority queue, one live task per account
- retry.py: bounded retry with fixed backoff
- executor.py: builds and submits a single check-in transaction
- task_scheduler.py: timer-driven loop that fires due tasks and reschedules accounts
"""
