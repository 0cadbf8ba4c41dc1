from __future__ import annotations

from tg_khatma.achievements import CATALOG, CATALOG_BY_KEY
from tg_khatma.duration import format_minutes_hm
from tg_khatma.quran_reference import QuranReference, default_reference
from tg_khatma.service import AnalyticsView, GoalView, LogOutcome

TIME_OF_DAY_LABELS = {
    "morning": "🌅 Morning",
    "afternoon": "☀️ Afternoon",
    "evening": "🌇 Evening",
    "night": "🌙 Night",
}

STATUS_LABELS = {
    "active": "▶️ active",
    "paused": "⏸ paused",
    "completed": "🏆 completed",
}


def _bar(ratio: float, width: int = 20) -> str:
    filled = max(0, min(width, int(round(ratio * width))))
    return "█" * filled + "░" * (width - filled)


def _spark(values: list[int]) -> str:
    blocks = " ▁▂▃▄▅▆▇█"
    peak = max(values, default=0)
    if peak <= 0:
        return blocks[0] * len(values)
    return "".join(blocks[min(8, round(v / peak * 8))] for v in values)


def surah_label(number: int, reference: QuranReference | None = None) -> str:
    ref = reference or default_reference()
    return f"{number}. {ref.surah(number).name}"


def progress_message(view: GoalView) -> str:
    goal, snap = view.goal, view.snapshot
    lines = [
        f"📖 {goal.name} ({STATUS_LABELS.get(goal.status, goal.status)})",
        "",
        f"Page {snap.current_page} / {snap.total_pages}",
        f"{_bar(snap.percent_complete / 100)} {snap.percent_complete:.1f}%",
        f"🔥 Streak: {snap.current_streak} days | Best: {snap.longest_streak}",
        f"🎯 Daily target: {snap.daily_target} pages | Average: {snap.average_pages_per_day:.1f}",
    ]
    if goal.status == "completed":
        done_on = goal.completed_at.date().isoformat() if goal.completed_at else "?"
        lines.append(f"✅ Completed on {done_on}")
    elif snap.overdue:
        lines.append(f"⚠️ Target date {goal.target_date.isoformat()} passed, {snap.pages_remaining} pages left")
    else:
        lines.append(
            f"⏳ {snap.days_remaining} days left, {snap.pages_remaining} pages "
            f"(~{snap.required_pages_per_day}/day needed)"
        )
        if snap.projected_completion_date:
            lines.append(f"📅 At this pace: {snap.projected_completion_date.isoformat()}")
    lines.extend(["", f"Last 7 days: {_spark(view.last_7_days)} ({sum(view.last_7_days)} pages)"])
    return "\n".join(lines)


def logged_message(outcome: LogOutcome, reference: QuranReference | None = None) -> str:
    e = outcome.entry
    span = surah_label(e.surah_from, reference)
    if e.surah_to != e.surah_from:
        span = f"{span} → {surah_label(e.surah_to, reference)}"
    lines = [f"✅ Logged {e.pages_read} pages in {format_minutes_hm(e.duration_minutes)} ({span})"]
    if outcome.duplicate:
        lines = [f"ℹ️ Already logged: {e.pages_read} pages ({span})"]
    if outcome.snapshot is not None:
        snap = outcome.snapshot
        lines.append(f"{_bar(snap.percent_complete / 100)} {snap.percent_complete:.1f}% | 🔥 {snap.current_streak}")
    for key in outcome.new_achievements:
        a = CATALOG_BY_KEY[key]
        lines.append(f"{a.icon} Achievement unlocked: {a.name}")
    if outcome.goal_completed:
        lines.append("🏆 Khatma complete! May it be accepted.")
    return "\n".join(lines)


def stats_message(view: AnalyticsView, reference: QuranReference | None = None) -> str:
    stats = view.stats
    if stats.total_sessions == 0:
        return "No readings logged yet. Try /read 5 20m 2 2"
    lines = [
        "📊 Reading stats",
        "",
        f"Sessions: {stats.total_sessions} | Pages: {stats.total_pages}",
        f"Time: {format_minutes_hm(stats.total_minutes)} (avg {format_minutes_hm(stats.average_session_minutes)})",
        f"🔥 Streak: {view.current_streak} days | Best: {view.longest_streak}",
        f"Favorite time: {TIME_OF_DAY_LABELS[view.favorite_time]}",
        f"Completed khatmas: {view.completed_khatmas}",
        "",
        f"Last 7 days:  {_spark(view.last_7_days)}",
        f"Last 30 days: {_spark(view.last_30_days)}",
    ]
    if view.surah_tally:
        lines.extend(["", "Most read surahs:"])
        for item in view.surah_tally[:5]:
            lines.append(f"  {surah_label(item.surah, reference)}: {item.count}x")
    return "\n".join(lines)


def achievements_message(unlocked: list[str]) -> str:
    have = set(unlocked)
    lines = [f"🏅 Achievements ({len(have & set(CATALOG_BY_KEY))}/{len(CATALOG)})", ""]
    for a in CATALOG:
        mark = a.icon if a.key in have else "🔒"
        lines.append(f"{mark} {a.name} — {a.description}")
    return "\n".join(lines)
