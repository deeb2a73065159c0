"""
Configuration constants for the file inventory.
"""

# --- Run Defaults ---
DEFAULT_START_DIR = "."
DEFAULT_OUTPUT_FILE = "file_data.json"
DEFAULT_CONCURRENCY = 10

# --- Hashing & Performance ---
# Every file is read once; each chunk is fed to all digest kinds.
DIGEST_KINDS = ("md5", "sha1", "sha256")
HASH_CHUNK_SIZE = 64 * 1024  # 64 KB chunks for reading

# Pending descriptors held between the walker and the workers, per worker.
QUEUE_DEPTH_FACTOR = 4

# --- CLI ---
USAGE_DESCRIPTION = (
    "Traverse the various folders on a system, gather information on each file "
    "to include file location, filename, file extension, size, mod time, is_dir, "
    "permissions, md5, sha1 and sha256, run in parallel, and store all the data "
    "in a JSON file."
)
