"""rwrsgateway — rate-limited caching gateway for the Running With Rifles server list."""
