"""Scenario Compiler Service."""
