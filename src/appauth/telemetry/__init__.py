"""Telemetry: operational logging for appauth.

Structure:
    system/         System operational logs (stderr + optional JSONL file)
                    - Token response warnings, callback rejections,
                      secrets provisioning events
"""

__all__: list[str] = []
