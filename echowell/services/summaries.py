"""Daily, weekly and monthly wellbeing summaries.

Aggregations are plain functions over ORM rows so they can be exercised
without a database; the ``build_*`` coroutines load the rows, ask the LLM
for narrative insights and fall back to canned text when it is unavailable.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from echowell.models import (
    Conversation,
    DailySummary,
    Message,
    MessageRole,
    MoodLog,
    VoiceToneLog,
)
from echowell.services.companion import extract_topics
from echowell.services.llm_client import LlmInvocationError, invoke_contract
from echowell.services.response_contract import (
    DailyInsights,
    MonthlyProgress,
    ResponseContractError,
    WeeklyOverview,
    WeeklyProgress,
)
from echowell.telemetry import increment_llm_fallback

logger = logging.getLogger(__name__)

INSIGHTS_SYSTEM_PROMPT = (
    "You are an empathetic AI therapist writing reflective summaries for a "
    "mental wellness app. Always answer with a single JSON object."
)

BRIEF_CONVERSATION_TEXT = (
    "Your conversation today was brief. Try having a longer conversation "
    "tomorrow for deeper insights."
)
MIN_INSIGHT_TEXT_LENGTH = 50
WEEKLY_EMPTY_MESSAGE = "Not enough data for weekly summary. Keep using the app!"

_DAILY_TEXT_LIMIT = 3000
_WEEKLY_TEXT_LIMIT = 2000
_MONTHLY_TEXT_LIMIT = 3000

_WEEKLY_PROGRESS_FALLBACK = WeeklyProgress(
    progress_areas=["emotional awareness", "communication"],
    achievements=["consistent engagement", "positive mood trends"],
    insights="You showed great consistency this week. Keep up the positive momentum!",
)
_MONTHLY_PROGRESS_FALLBACK = MonthlyProgress(
    goals_achieved=2,
    insights="You made significant progress this month. Well done!",
    recommendations=["Continue regular conversations", "Practice mindfulness"],
)
_WEEKLY_OVERVIEW_FALLBACK = WeeklyOverview(
    overview="Thank you for showing up for yourself this week.",
    patterns="",
    growth="",
    recommendations=["Continue regular conversations", "Practice mindfulness"],
    celebration="Every check-in is a step forward.",
)


# ---------------------------------------------------------------------------
# Pure aggregations
# ---------------------------------------------------------------------------


def conversation_quality(user_message_count: int) -> str:
    if user_message_count < 3:
        return "short"
    if user_message_count < 10:
        return "moderate"
    return "deep"


def average_mood(mood_logs: Iterable[MoodLog]) -> Optional[float]:
    scores = [log.mood_score for log in mood_logs]
    if not scores:
        return None
    return sum(scores) / len(scores)


def count_emotions(mood_logs: Iterable[MoodLog]) -> dict[str, int]:
    counts: Counter[str] = Counter()
    for log in mood_logs:
        if isinstance(log.emotions, list):
            counts.update(str(emotion) for emotion in log.emotions)
    return dict(counts)


def analyze_voice_tones(voice_logs: Sequence[VoiceToneLog]) -> dict[str, Any]:
    """Most common tone, per-tone counts and mean confidence for a day."""

    if not voice_logs:
        return {"avg_tone": "neutral", "tone_variations": {}, "emotional_stability": 0.5}

    counts = Counter(log.tone_detected for log in voice_logs)
    total_confidence = sum(log.confidence_score for log in voice_logs)
    return {
        "avg_tone": counts.most_common(1)[0][0],
        "tone_variations": dict(counts),
        "emotional_stability": total_confidence / len(voice_logs),
    }


def _ranked(counts: dict[str, int], limit: int = 5) -> list[tuple[str, int]]:
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]


def aggregate_week(daily_summaries: Sequence[DailySummary]) -> dict[str, Any]:
    """Roll a run of daily summaries up into weekly metrics."""

    days_active = len(daily_summaries)
    mood_total = sum(day.avg_mood_score for day in daily_summaries if day.avg_mood_score)
    avg_mood = mood_total / days_active if days_active else 0.0

    topic_counts: Counter[str] = Counter()
    emotion_counts: Counter[str] = Counter()
    for day in daily_summaries:
        topic_counts.update(day.topics_discussed or [])
        for emotion, count in (day.dominant_emotions or {}).items():
            emotion_counts[emotion] += int(count)

    tone_trend = [
        day.voice_tone_analysis["avg_tone"]
        for day in daily_summaries
        if isinstance(day.voice_tone_analysis, dict) and day.voice_tone_analysis.get("avg_tone")
    ]

    return {
        "period": {
            "start": daily_summaries[0].date.isoformat() if daily_summaries else None,
            "end": daily_summaries[-1].date.isoformat() if daily_summaries else None,
        },
        "metrics": {
            "days_active": days_active,
            "total_conversations": sum(day.conversation_count for day in daily_summaries),
            "total_messages": sum(day.total_messages for day in daily_summaries),
            "avg_mood": round(avg_mood, 1),
        },
        "top_topics": [
            {"topic": topic, "count": count} for topic, count in _ranked(dict(topic_counts))
        ],
        "top_emotions": [
            {"emotion": emotion, "count": count}
            for emotion, count in _ranked(dict(emotion_counts))
        ],
        "tone_trend": tone_trend,
    }


def week_bounds(day: date) -> tuple[date, date]:
    """Sunday-to-Saturday calendar week containing ``day``."""

    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_bounds(day: date) -> tuple[date, date]:
    start = day.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def mood_scores(daily_summaries: Iterable[DailySummary]) -> list[float]:
    return [day.avg_mood_score for day in daily_summaries if day.avg_mood_score is not None]


def emotional_growth(scores: Sequence[float]) -> float:
    """Mean of the second half of the scores minus the mean of the first half."""

    middle = len(scores) // 2
    return _mean(scores[middle:]) - _mean(scores[:middle])


def mood_trend(scores: Sequence[float]) -> str:
    """Compare the last quarter of the month with the first quarter."""

    if not scores:
        return "stable"
    quarter = max(1, len(scores) // 4)
    first = _mean(scores[:quarter])
    last = _mean(scores[-quarter:])
    if last > first + 0.5:
        return "improving"
    if last < first - 0.5:
        return "declining"
    return "stable"


def emotional_stability(scores: Sequence[float]) -> float:
    if len(scores) < 2:
        variance = 0.0
    else:
        mean = _mean(scores)
        variance = sum((score - mean) ** 2 for score in scores) / len(scores)
    return round(max(0.0, 1 - variance / 10), 2)


def therapeutic_progress(daily_summaries: Sequence[DailySummary]) -> float:
    if not daily_summaries:
        return 0.0
    deep_days = sum(1 for day in daily_summaries if day.conversation_quality == "deep")
    return round(deep_days / len(daily_summaries), 2)


# ---------------------------------------------------------------------------
# LLM insights
# ---------------------------------------------------------------------------


async def generate_daily_insights(
    conversation_text: str,
    mood_logs: Sequence[MoodLog],
    voice_logs: Sequence[VoiceToneLog],
) -> DailyInsights:
    if len(conversation_text.strip()) < MIN_INSIGHT_TEXT_LENGTH:
        return DailyInsights(summary=BRIEF_CONVERSATION_TEXT)

    moods = [{"mood_score": log.mood_score, "emotions": log.emotions} for log in mood_logs]
    tones = [
        {
            "tone_detected": log.tone_detected,
            "confidence_score": log.confidence_score,
            "emotional_state": log.emotional_state,
        }
        for log in voice_logs
    ]
    prompt = f"""Analyze this person's day based on their conversations, mood logs, and voice tone.

Conversation: "{conversation_text}"
Mood Logs: {json.dumps(moods)}
Voice Tones: {json.dumps(tones)}

Provide:
1. A compassionate, supportive summary (2-3 paragraphs)
2. Key topics they discussed
3. Patterns you noticed
4. Gentle encouragement for tomorrow

Format as JSON:
{{
  "summary": "...",
  "topics": ["topic1", "topic2"],
  "patterns": "...",
  "encouragement": "..."
}}

Be warm, non-judgmental, and supportive. Always remain polite and understanding."""

    try:
        return await invoke_contract(
            DailyInsights,
            system_prompt=INSIGHTS_SYSTEM_PROMPT,
            user_prompt=prompt,
        )
    except (LlmInvocationError, ResponseContractError) as exc:
        logger.warning("Daily insights unavailable, using keyword topics: %s", exc)
        increment_llm_fallback("daily_summary")
        return DailyInsights(
            summary="Thank you for taking time to reflect today.",
            topics=extract_topics(conversation_text),
            encouragement="Be gentle with yourself tomorrow.",
        )


async def generate_weekly_overview(
    daily_summaries: Sequence[DailySummary],
    aggregate: dict[str, Any],
) -> WeeklyOverview:
    metrics = aggregate["metrics"]
    topics = ", ".join(f"{t['topic']} ({t['count']})" for t in aggregate["top_topics"])
    emotions = ", ".join(f"{e['emotion']} ({e['count']})" for e in aggregate["top_emotions"])
    daily_lines = "\n".join(
        f"{day.date.isoformat()}: {(day.ai_insights or '')[:200]}" for day in daily_summaries
    )
    prompt = f"""Provide a comprehensive weekly summary for this person.

Weekly Data:
- Days active: {metrics['days_active']}/7
- Total conversations: {metrics['total_conversations']}
- Total messages: {metrics['total_messages']}
- Average mood: {metrics['avg_mood']:.1f}/10
- Top topics: {topics}
- Dominant emotions: {emotions}
- Voice tone progression: {' -> '.join(aggregate['tone_trend'])}

Daily Insights:
{daily_lines}

Provide:
- Warm, personalized weekly overview (2-3 paragraphs)
- Notable patterns or progress observed
- Areas of growth
- Gentle recommendations for next week
- Celebration of positive moments

Be encouraging, supportive, and always polite. Format as JSON:
{{
  "overview": "...",
  "patterns": "...",
  "growth": "...",
  "recommendations": [...],
  "celebration": "..."
}}"""

    try:
        return await invoke_contract(
            WeeklyOverview,
            system_prompt=INSIGHTS_SYSTEM_PROMPT,
            user_prompt=prompt,
        )
    except (LlmInvocationError, ResponseContractError) as exc:
        logger.warning("Weekly overview unavailable: %s", exc)
        increment_llm_fallback("weekly_summary")
        return _WEEKLY_OVERVIEW_FALLBACK.model_copy(deep=True)


def _joined_insights(daily_summaries: Sequence[DailySummary], limit: int) -> str:
    return " ".join(day.ai_insights or "" for day in daily_summaries)[:limit]


async def generate_weekly_progress(
    daily_summaries: Sequence[DailySummary],
    growth: float,
) -> WeeklyProgress:
    prompt = f"""Analyze this week's therapeutic progress based on daily summaries and emotional growth of {growth:.1f}.

Daily summaries: "{_joined_insights(daily_summaries, _WEEKLY_TEXT_LIMIT)}"

Provide insights in JSON format:
{{
  "progressAreas": ["area1", "area2"],
  "achievements": ["achievement1", "achievement2"],
  "insights": "Comprehensive weekly analysis and encouragement"
}}

Be supportive, encouraging, and focus on growth and progress."""

    try:
        result = await invoke_contract(
            WeeklyProgress,
            system_prompt=INSIGHTS_SYSTEM_PROMPT,
            user_prompt=prompt,
        )
    except (LlmInvocationError, ResponseContractError) as exc:
        logger.warning("Weekly progress insights unavailable: %s", exc)
        increment_llm_fallback("weekly_analytics")
        return _WEEKLY_PROGRESS_FALLBACK.model_copy(deep=True)

    if not result.insights:
        result.insights = "Great progress this week!"
    return result


async def generate_monthly_progress(
    daily_summaries: Sequence[DailySummary],
    trend: str,
) -> MonthlyProgress:
    prompt = f"""Analyze this month's therapeutic progress with mood trend: {trend}.

Monthly summaries: "{_joined_insights(daily_summaries, _MONTHLY_TEXT_LIMIT)}"

Provide insights in JSON format:
{{
  "goalsAchieved": 3,
  "insights": "Comprehensive monthly analysis",
  "recommendations": ["recommendation1", "recommendation2"]
}}

Be encouraging and provide actionable recommendations for continued growth."""

    try:
        result = await invoke_contract(
            MonthlyProgress,
            system_prompt=INSIGHTS_SYSTEM_PROMPT,
            user_prompt=prompt,
        )
    except (LlmInvocationError, ResponseContractError) as exc:
        logger.warning("Monthly progress insights unavailable: %s", exc)
        increment_llm_fallback("monthly_analytics")
        return _MONTHLY_PROGRESS_FALLBACK.model_copy(deep=True)

    if not result.insights:
        result.insights = "Excellent progress this month!"
    if not result.recommendations:
        result.recommendations = list(_MONTHLY_PROGRESS_FALLBACK.recommendations)
    return result


# ---------------------------------------------------------------------------
# Database-backed builders
# ---------------------------------------------------------------------------


def _day_range(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


async def load_daily_summary(
    session: AsyncSession, user_id: int, day: date
) -> DailySummary | None:
    result = await session.execute(
        select(DailySummary).where(DailySummary.user_id == user_id, DailySummary.date == day)
    )
    return result.scalar_one_or_none()


async def load_daily_summaries(
    session: AsyncSession, user_id: int, start: date, end: date
) -> list[DailySummary]:
    result = await session.execute(
        select(DailySummary)
        .where(
            DailySummary.user_id == user_id,
            DailySummary.date >= start,
            DailySummary.date <= end,
        )
        .order_by(DailySummary.date.asc())
    )
    return list(result.scalars().all())


async def build_daily_summary(
    session: AsyncSession, user_id: int, day: date
) -> DailySummary | None:
    """Generate and upsert the summary for ``day``; None when nothing was discussed."""

    start, end = _day_range(day)
    conversation_ids = (
        await session.execute(
            select(Conversation.id).where(
                Conversation.user_id == user_id,
                Conversation.created_at >= start,
                Conversation.created_at < end,
            )
        )
    ).scalars().all()
    if not conversation_ids:
        return None

    messages = (
        await session.execute(
            select(Message)
            .where(Message.conversation_id.in_(conversation_ids))
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
    ).scalars().all()
    mood_logs = (
        await session.execute(
            select(MoodLog).where(
                MoodLog.user_id == user_id,
                MoodLog.logged_at >= start,
                MoodLog.logged_at < end,
            )
        )
    ).scalars().all()
    voice_logs = (
        await session.execute(
            select(VoiceToneLog).where(
                VoiceToneLog.user_id == user_id,
                VoiceToneLog.recorded_at >= start,
                VoiceToneLog.recorded_at < end,
            )
        )
    ).scalars().all()

    user_texts = [m.content for m in messages if m.role == MessageRole.USER]
    conversation_text = " ".join(user_texts)[:_DAILY_TEXT_LIMIT]
    insights = await generate_daily_insights(conversation_text, mood_logs, voice_logs)

    summary = await load_daily_summary(session, user_id, day)
    if summary is None:
        summary = DailySummary(user_id=user_id, date=day)
        session.add(summary)

    summary.conversation_count = len(conversation_ids)
    summary.total_messages = len(messages)
    summary.avg_mood_score = average_mood(mood_logs)
    summary.dominant_emotions = count_emotions(mood_logs)
    summary.topics_discussed = list(insights.topics)
    summary.conversation_quality = conversation_quality(len(user_texts))
    summary.ai_insights = insights.as_text()
    summary.voice_tone_analysis = analyze_voice_tones(voice_logs)
    summary.updated_at = datetime.utcnow()

    await session.commit()
    await session.refresh(summary)
    logger.info(
        "Daily summary stored user_id=%s date=%s conversations=%s messages=%s",
        user_id,
        day.isoformat(),
        summary.conversation_count,
        summary.total_messages,
    )
    return summary


async def build_weekly_summary(
    session: AsyncSession, user_id: int, today: date
) -> dict[str, Any] | None:
    """Summarise the daily summaries of the trailing seven days."""

    daily = await load_daily_summaries(session, user_id, today - timedelta(days=7), today)
    if not daily:
        return None

    aggregate = aggregate_week(daily)
    overview = await generate_weekly_overview(daily, aggregate)
    return {**aggregate, "insights": overview.model_dump()}


async def build_weekly_analytics(
    session: AsyncSession, user_id: int, day: date
) -> dict[str, Any]:
    start, end = week_bounds(day)
    daily = await load_daily_summaries(session, user_id, start, end)
    if not daily:
        return {
            "week_start": start.isoformat(),
            "total_conversations": 0,
            "total_messages": 0,
            "avg_daily_mood": 0,
            "emotional_growth": 0,
            "top_themes": [],
            "progress_areas": [],
            "achievements": [],
            "insights": "No activity this week. Start conversations to see your weekly insights.",
        }

    scores = mood_scores(daily)
    growth = emotional_growth(scores)
    topic_counts: Counter[str] = Counter()
    for summary in daily:
        topic_counts.update(summary.topics_discussed or [])
    progress = await generate_weekly_progress(daily, growth)

    return {
        "week_start": start.isoformat(),
        "total_conversations": sum(d.conversation_count for d in daily),
        "total_messages": sum(d.total_messages for d in daily),
        "avg_daily_mood": round(_mean(scores), 1),
        "emotional_growth": round(growth, 1),
        "top_themes": [topic for topic, _ in _ranked(dict(topic_counts))],
        "progress_areas": progress.progress_areas,
        "achievements": progress.achievements,
        "insights": progress.insights,
    }


async def build_monthly_analytics(
    session: AsyncSession, user_id: int, day: date
) -> dict[str, Any]:
    start, end = month_bounds(day)
    month_label = start.strftime("%Y-%m")
    daily = await load_daily_summaries(session, user_id, start, end)
    if not daily:
        return {
            "month": month_label,
            "total_sessions": 0,
            "mood_trend": "stable",
            "emotional_stability_score": 0,
            "therapeutic_progress": 0,
            "goals_achieved": 0,
            "insights": "No activity this month. Start conversations to see your monthly insights.",
            "recommendations": [],
        }

    scores = mood_scores(daily)
    trend = mood_trend(scores)
    progress = await generate_monthly_progress(daily, trend)

    return {
        "month": month_label,
        "total_sessions": sum(d.conversation_count for d in daily),
        "mood_trend": trend,
        "emotional_stability_score": emotional_stability(scores),
        "therapeutic_progress": therapeutic_progress(daily),
        "goals_achieved": progress.goals_achieved,
        "insights": progress.insights,
        "recommendations": progress.recommendations,
    }


__all__ = [
    "WEEKLY_EMPTY_MESSAGE",
    "aggregate_week",
    "analyze_voice_tones",
    "average_mood",
    "build_daily_summary",
    "build_monthly_analytics",
    "build_weekly_analytics",
    "build_weekly_summary",
    "conversation_quality",
    "count_emotions",
    "emotional_growth",
    "emotional_stability",
    "load_daily_summary",
    "mood_trend",
    "month_bounds",
    "therapeutic_progress",
    "week_bounds",
]
