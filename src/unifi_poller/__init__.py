"""Poll a UniFi controller and ship UDM metrics to InfluxDB."""

__version__ = "0.3.0"
