"""Core constants for kuse-undo.

This module defines constants used throughout the undo subsystem:
- Size and history limits for backups and per-conversation stacks
- On-disk layout of the ``.kuse`` staging area
- Environment variable names recognised by the settings loader
"""

# ============================================================================
# Limits
# ============================================================================

#: Files at or above this size (bytes) are overwritten without a backup (100 MiB)
MAX_BACKUP_BYTES: int = 100 * 1024 * 1024

#: Number of undo records retained per conversation before eviction
MAX_HISTORY_PER_CONVERSATION: int = 10

# ============================================================================
# On-disk Layout
# ============================================================================

#: Staging directory created under the working directory
KUSE_DIR_NAME: str = ".kuse"

#: Subdirectory holding content snapshots: backups/<conversation>/<ts>/<file>
BACKUPS_DIR_NAME: str = "backups"

#: Subdirectory holding relocated deletions: trash/<ts>_<file>
TRASH_DIR_NAME: str = "trash"

# ============================================================================
# Environment
# ============================================================================

#: Overrides MAX_BACKUP_BYTES
ENV_MAX_BACKUP_BYTES: str = "KUSE_MAX_BACKUP_BYTES"

#: Overrides MAX_HISTORY_PER_CONVERSATION
ENV_HISTORY_LIMIT: str = "KUSE_HISTORY_LIMIT"

#: Pins the directory holding ``.kuse`` instead of the live working directory
ENV_BASE_DIR: str = "KUSE_BASE_DIR"

# ============================================================================
# Tool Names
# ============================================================================

#: Tool that pops and reverses the latest record
UNDO_TOOL: str = "undo_last"
