"""Data models for syntax trees and configuration."""
