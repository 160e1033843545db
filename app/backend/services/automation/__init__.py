"""Automation services for the scheduled dump job.

This package provides:
- Environment and tool validation
- Archive and encryption stages around external tools
- Storage providers (rclone)
- Retention policy planning
- Orchestration of a single backup run
"""
