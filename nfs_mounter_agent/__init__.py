"""NFS mount health agent — passive mount checks exposed over HTTP + Prometheus."""

PROGRAM_NAME = "nfs_mounter_agent"
__version__ = "0.1.0"
