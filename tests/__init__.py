"""Tests for the Alexa Thermostat integration."""
