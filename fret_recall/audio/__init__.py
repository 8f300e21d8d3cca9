"""Audio decoding and pitch estimation."""
