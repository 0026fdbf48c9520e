"""Tests for Print SRS"""
