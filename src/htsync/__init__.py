"""htsync — keeps NGINX htpasswd partitions in sync with the user directory."""

__version__ = "0.1.0"
