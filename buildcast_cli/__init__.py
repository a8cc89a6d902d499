"""
buildcast CLI - Command-line interface for build notifications.

This package lets a CI job step publish its result over MQTT without writing
Python.

Usage:
    buildcast notify notifier.yaml --job demo --number 42 --result SUCCESS
    buildcast test-connection notifier.yaml
    buildcast validate notifier.yaml
    buildcast qos-levels
"""

__version__ = "1.0.0"
