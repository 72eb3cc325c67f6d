"""Scheduling: clinic hours, slot availability, slot holds, booking negotiation and appointments."""
