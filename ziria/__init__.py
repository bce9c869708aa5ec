"""Ziria - Minecraft avatar and skin rendering service."""
