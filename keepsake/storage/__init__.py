"""Storage backends for uploaded blobs and the video catalog."""
