class Globals:
    ARCHIVE_ENDING = ".tar.gz"
    MANIFEST_FILE = "backup_info.txt"
    IGNORE_FILE = ".gitignore"
    DEFAULT_CONFIG_FILE = "~/.config/repobackup/config.yaml"
    DEFAULT_LOG_FILE = "~/.config/repobackup/repobackup.log"
    DEFAULT_TIMEZONE = "Europe/Moscow"
    LOCK_FILE_NAME = "repobackup.lock"
    LOCK_FILE_MODE = 0o666
    REQUIRED_SYSTEM_BINS = ["tar", "git", "rsync"]

    # Executor
    RETRY_DELAY = 5  # seconds
    DEFAULT_ATTEMPTS = 3
    PROBE_ATTEMPTS = 2

    # Scheduler
    SLEEP_AFTER_RUN = 60  # seconds
    POLL_INTERVAL = 30  # seconds

    FREQUENCIES = ["daily", "weekly", "monthly"]
    DEFAULT_BACKUP_TIME = "02:00"

    SERVICE_NAME = "repobackup"
    SYSTEMD_DIR = "/etc/systemd/system"

    GIT_TUNING = [
        ("http.postBuffer", "524288000"),  # 500 MB
        ("http.timeout", "300"),
        ("core.compression", "9"),
        ("push.default", "simple"),
        ("pull.rebase", "false"),
    ]

    DEFAULT_IGNORE_PATTERNS = """# Temporary files
*.tmp
*.temp
*.log
*.pid
*.swp
*.swo
*~

# System files
.DS_Store
Thumbs.db
desktop.ini

# Disk images
*.iso
*.img
*.dmg
*.vdi
*.vmdk

# Caches
*.cache
cache/
.cache/
node_modules/
.npm/
.yarn/

# Keys and certificates
*.key
*.pem
*.p12
*.pfx
id_rsa
id_ecdsa
id_ed25519
"""
