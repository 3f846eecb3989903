"""Transcript acquisition, prompting and AI analysis for submitted videos."""
