"""Console I/O — the request, response, and standard streams of one run."""
