# ui_components.py
import html
from typing import Sequence

from risk_engine import SpecificRisk
from risk_output_adapter import gauge_percent

LEVEL_COLORS = {
    "low": ("rgba(16,185,129,0.12)", "#065f46"),
    "moderate": ("rgba(245,158,11,0.14)", "#92400e"),
    "high": ("rgba(249,115,22,0.14)", "#9a3412"),
    "very-high": ("rgba(239,68,68,0.14)", "#991b1b"),
}

SEVERITY_COLORS = {
    "good": "#059669",
    "caution": "#d97706",
    "elevated": "#ea580c",
    "danger": "#dc2626",
}

PRIORITY_COLORS = {
    "critical": "#ef4444",
    "high": "#f97316",
    "medium": "#3b82f6",
}


def _esc(x) -> str:
    return html.escape(str(x), quote=True)


def render_section_progress(current: int, sections: Sequence[str]) -> str:
    """
    Numbered step bar for the multi-step form.
    Steps up to and including `current` are filled.
    """
    cur = max(0, min(len(sections) - 1, int(current or 0)))

    segs = []
    for i, _ in enumerate(sections):
        done = i <= cur
        segs.append(f"""
        <div style="
            width:32px; height:32px; border-radius:999px;
            display:flex; align-items:center; justify-content:center;
            font-weight:700; font-size:0.85rem;
            background:{'#2563eb' if done else '#e5e7eb'};
            color:{'#fff' if done else '#4b5563'};
        ">{i + 1}</div>
        """)
        if i < len(sections) - 1:
            segs.append(
                f'<div style="flex:1; height:4px; margin:0 8px; '
                f'background:{"#2563eb" if i < cur else "#e5e7eb"};"></div>'
            )

    return f"""
    <div style="margin-bottom:14px;">
      <div style="display:flex; align-items:center;">{''.join(segs)}</div>
      <div style="font-weight:700; font-size:1.1rem; margin-top:10px;">{_esc(sections[cur])}</div>
    </div>
    """


def render_risk_gauge(level: str, score: int, description: str) -> str:
    bg, fg = LEVEL_COLORS.get(level, ("rgba(17,24,39,0.06)", "#111827"))
    pct = gauge_percent(score)
    return f"""
    <div style="background:{bg}; border-radius:16px; padding:16px;">
      <div style="display:flex; justify-content:space-between; align-items:baseline;">
        <div style="font-weight:900; font-size:1.2rem; color:{fg};">{_esc(level.replace('-', ' ').title())} risk</div>
        <div style="font-weight:700; color:{fg};">Score {score}</div>
      </div>
      <div style="color:{fg}; margin:4px 0 10px 0;">{_esc(description)}</div>
      <div style="height:12px; border-radius:999px; background:#e5e7eb;">
        <div style="width:{pct:.1f}%; height:12px; border-radius:999px; background:{fg};"></div>
      </div>
    </div>
    """


def render_specific_risk_card(risk: SpecificRisk) -> str:
    bg, fg = LEVEL_COLORS.get(risk.level, ("rgba(17,24,39,0.06)", "#111827"))
    return f"""
    <div style="border:1px solid rgba(17,24,39,0.12); border-radius:14px; padding:12px; background:{bg};">
      <div style="font-weight:800;">{_esc(risk.type)}</div>
      <div style="font-size:1.6rem; font-weight:900; color:{fg};">{risk.percentage:.0f}%</div>
      <div style="font-size:0.8rem; font-weight:700; color:{fg}; text-transform:uppercase;">{_esc(risk.level)}</div>
      <div style="font-size:0.85rem; color:rgba(17,24,39,0.70); margin-top:4px;">{_esc(risk.description)}</div>
    </div>
    """


def severity_badge(label: str, severity: str) -> str:
    color = SEVERITY_COLORS.get(severity, "#374151")
    return f'<span style="color:{color}; font-weight:700;">{_esc(label)}</span>'


def render_recommendation(category: str, priority: str, text: str) -> str:
    color = PRIORITY_COLORS.get(priority, PRIORITY_COLORS["medium"])
    return f"""
    <div style="border-left:4px solid {color}; padding:10px 12px; margin-bottom:8px; background:#fff; border-radius:8px;">
      <div style="font-weight:800;">{_esc(category)} <span style="font-size:0.75rem; color:{color};">({_esc(priority)})</span></div>
      <div style="font-size:0.9rem; color:rgba(17,24,39,0.80);">{_esc(text)}</div>
    </div>
    """
