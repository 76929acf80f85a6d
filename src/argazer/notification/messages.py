"""Turn update results into length-bounded notification messages."""

from __future__ import annotations

from argazer.models.result import ApplicationCheckResult

# Telegram rejects messages over 4096 characters.
MAX_MESSAGE_LENGTH = 3900


def format_update(update: ApplicationCheckResult) -> str:
    lines = [
        f"{update.app_name} ({update.project})",
        f"  Chart: {update.chart_name}",
        f"  Version: {update.current_version} -> {update.latest_version}",
    ]
    if update.constraint_applied not in ("", "major"):
        lines.append(f"  Constraint: {update.constraint_applied}")
    if (
        update.has_update_outside_constraint
        and update.latest_version_all
        and update.latest_version_all != update.latest_version
    ):
        lines.append(f"  Note: {update.latest_version_all} available outside constraint")
    lines.append(f"  Repo: {update.repo_url}")
    return "\n".join(lines) + "\n\n"


def build_messages(
    updates: list[ApplicationCheckResult],
    max_length: int = MAX_MESSAGE_LENGTH,
) -> list[str]:
    """Pack one block per update into as few messages as fit ``max_length``.

    A block is never split; one that is longer than ``max_length`` on its
    own becomes a message of its own.
    """
    messages: list[str] = []
    current = ""
    for block in (format_update(u) for u in updates):
        if current and len(current) + len(block) > max_length:
            messages.append(current)
            current = ""
        current += block
    if current:
        messages.append(current)
    return messages


def notification_subject(index: int, count: int, total_updates: int) -> str:
    if count > 1:
        return f"Argazer Notification [{index}/{count}]: {total_updates} Update(s)"
    return f"Argazer Notification: {total_updates} Helm Chart Update(s) Available"
