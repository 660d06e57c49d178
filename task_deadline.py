#!/usr/bin/env python3
# task_deadline: deadline text engine and terminal date/time picker for to-do tasks
#
# Accepted deadline text (local time is JST, a fixed UTC+09:00, no DST)
#   2025/10/25 16:30          slash form (month/day/hour without leading zeros)
#   2025年10月25日16時30分     kanji form
#   2025年10月25日16時         kanji form, minute defaults to 0
#   2025-10-25-16:30:00       legacy dash form, seconds are dropped
#   2025-10-25T07:30:00Z      stored form (UTC), passed through as-is
#
# Stored form is always None or YYYY-MM-DDTHH:MM:00Z.
#
# Picker hotkeys
#   h/l, arrows  move day cursor (j/k move by a week)
#   </>          previous / next month (pageup/pagedown too)
#   space        select the day under the cursor
#   +/-          next / previous half-hour time slot
#   t            jump to today
#   Enter        confirm (needs both a day and a time)
#   x            clear the deadline
#   q, Esc       cancel
#
# Config (YAML, optional)
#   display_style: slash | kanji
#   log_level: ERROR
#   log_path: ~/task_deadline.log
#   theme: {picker.title: "bold #ffd75f"}

from __future__ import annotations

import argparse
import calendar
import datetime as dt
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from typing import Callable, Dict, List, Optional, Tuple

import yaml
from prompt_toolkit import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style
from prompt_toolkit.utils import get_cwidth
from prompt_toolkit.widgets import Frame

logger = logging.getLogger('task_deadline')

JST = dt.timezone(dt.timedelta(hours=9), 'JST')
CANONICAL_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:00Z$", re.ASCII)

DISPLAY_STYLES = ('slash', 'kanji')
_UNSET = object()


# -----------------------------
# Config
# -----------------------------
@dataclass
class Config:
    display_style: str = 'slash'
    log_level: str = 'ERROR'
    log_path: Optional[str] = None
    theme: Dict[str, str] = field(default_factory=dict)


def load_config(path: Optional[str]) -> Config:
    """Read the YAML config; a missing path yields the defaults."""
    if not path or not os.path.isfile(path):
        return Config()
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config: expected a mapping, got {type(raw).__name__}")
    style = str(raw.get("display_style") or "slash").strip().lower()
    if style not in DISPLAY_STYLES:
        raise ValueError(f"Config: 'display_style' must be one of {', '.join(DISPLAY_STYLES)}: {style}")
    theme_raw = raw.get("theme") or {}
    if not isinstance(theme_raw, dict):
        raise ValueError("Config: 'theme' must be a mapping of style class to style string.")
    theme = {str(k): str(v) for k, v in theme_raw.items() if isinstance(v, str)}
    log_path = raw.get("log_path")
    return Config(
        display_style=style,
        log_level=str(raw.get("log_level") or "ERROR"),
        log_path=os.path.expanduser(str(log_path)) if log_path else None,
        theme=theme,
    )


def setup_logging(log_level: str = 'ERROR', log_path: Optional[str] = None) -> logging.Logger:
    if log_path is None:
        log_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'task_deadline.log')
    # Reset handlers so repeated CLI runs (and tests) control file output.
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.DEBUG)
    fh = RotatingFileHandler(log_path, maxBytes=2000000, backupCount=2, encoding='utf-8')
    fh.setLevel(getattr(logging, str(log_level).upper(), logging.ERROR))
    fh.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(message)s'))
    logger.addHandler(fh)
    return logger


# -----------------------------
# Deadline text recognition
# -----------------------------
_SLASH_RE = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})\s+(\d{1,2}):(\d{2})$", re.ASCII)
_KANJI_MINUTE_RE = re.compile(r"^(\d{4})年(\d{1,2})月(\d{1,2})日(\d{1,2})時(\d{1,2})分$", re.ASCII)
_KANJI_HOUR_RE = re.compile(r"^(\d{4})年(\d{1,2})月(\d{1,2})日(\d{1,2})時$", re.ASCII)
_LEGACY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(\d{2}):(\d{2}):(\d{2})$", re.ASCII)
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})Z$", re.ASCII)

# Checked in this order; the first match wins.
LOCAL_GRAMMARS: List[Tuple[str, re.Pattern]] = [
    ('slash', _SLASH_RE),
    ('kanji-minute', _KANJI_MINUTE_RE),
    ('kanji-hour', _KANJI_HOUR_RE),
    ('legacy', _LEGACY_RE),
]


@dataclass(frozen=True)
class LocalDateTime:
    """Wall-clock components in JST."""
    year: int
    month: int
    day: int
    hour: int
    minute: int = 0

    def to_utc(self) -> dt.datetime:
        # Days past the end of the month roll forward (Feb 30 -> Mar 2).
        base = dt.date(self.year, self.month, 1) + dt.timedelta(days=self.day - 1)
        local = dt.datetime(base.year, base.month, base.day, self.hour, self.minute, tzinfo=JST)
        return local.astimezone(dt.timezone.utc)

    @classmethod
    def from_utc(cls, value: dt.datetime) -> "LocalDateTime":
        if value.tzinfo is None:
            value = value.replace(tzinfo=dt.timezone.utc)
        local = value.astimezone(JST)
        return cls(local.year, local.month, local.day, local.hour, local.minute)

    @property
    def date(self) -> dt.date:
        return dt.date(self.year, self.month, self.day)

    @property
    def time_text(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class Recognized:
    grammar: str
    local: Optional[LocalDateTime] = None
    utc: Optional[dt.datetime] = None


def _in_ranges(month: int, day: int, hour: int, minute: int) -> bool:
    return 1 <= month <= 12 and 1 <= day <= 31 and 0 <= hour <= 23 and 0 <= minute <= 59


def recognize(text: Optional[str]) -> Optional[Recognized]:
    """Match text against the deadline grammars.

    Returns None for empty text and for anything no grammar accepts; callers
    that need to tell those apart use parse_deadline().
    """
    raw = (text or '').strip()
    if not raw:
        return None
    for grammar, pattern in LOCAL_GRAMMARS:
        m = pattern.match(raw)
        if not m:
            continue
        parts = [int(g) for g in m.groups()]
        year, month, day, hour = parts[:4]
        minute = parts[4] if len(parts) > 4 else 0
        if grammar == 'legacy' and not 0 <= parts[5] <= 59:
            return None
        if not _in_ranges(month, day, hour, minute):
            return None
        return Recognized(grammar, local=LocalDateTime(year, month, day, hour, minute))
    m = _ISO_RE.match(raw)
    if m:
        try:
            utc = dt.datetime(*(int(g) for g in m.groups()), tzinfo=dt.timezone.utc)
        except ValueError:
            return None
        return Recognized('iso', utc=utc)
    return None


# -----------------------------
# Normalization
# -----------------------------
PARSE_EMPTY = 'empty'
PARSE_OK = 'ok'
PARSE_INVALID = 'invalid'


@dataclass(frozen=True)
class DeadlineParse:
    """Outcome of reading deadline text.

    ``value`` is what gets stored: None for both empty and invalid text, so a
    caller that only persists keeps the "absent" contract, while UI layers can
    check ``status`` to flag text that was typed but not understood.
    """
    status: str
    value: Optional[str] = None
    grammar: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == PARSE_OK

    @property
    def invalid(self) -> bool:
        return self.status == PARSE_INVALID


def to_canonical(value: dt.datetime) -> str:
    """Render an aware datetime as the stored UTC string with zero seconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    u = value.astimezone(dt.timezone.utc)
    return f"{u.year:04d}-{u.month:02d}-{u.day:02d}T{u.hour:02d}:{u.minute:02d}:00Z"


def parse_deadline(text: Optional[str]) -> DeadlineParse:
    raw = (text or '').strip()
    if not raw:
        return DeadlineParse(PARSE_EMPTY)
    rec = recognize(raw)
    if rec is None:
        logger.debug("Unrecognized deadline text: %r", raw)
        return DeadlineParse(PARSE_INVALID)
    try:
        utc = rec.utc if rec.utc is not None else rec.local.to_utc()
    except (ValueError, OverflowError):
        logger.debug("Deadline text out of calendar range: %r", raw)
        return DeadlineParse(PARSE_INVALID, grammar=rec.grammar)
    return DeadlineParse(PARSE_OK, value=to_canonical(utc), grammar=rec.grammar)


def normalize(text: Optional[str]) -> Optional[str]:
    """Convert deadline text to the stored form; never raises."""
    return parse_deadline(text).value


# -----------------------------
# Formatting
# -----------------------------
OVERDUE_LABEL = '期限超過'


def _parse_stored(deadline: str) -> dt.datetime:
    m = _ISO_RE.match(deadline.strip())
    if not m:
        raise ValueError(f"not a stored deadline: {deadline!r}")
    return dt.datetime(*(int(g) for g in m.groups()), tzinfo=dt.timezone.utc)


def _stored_to_local(deadline: str) -> LocalDateTime:
    return LocalDateTime.from_utc(_parse_stored(deadline))


def format_slash(deadline: Optional[str]) -> str:
    """Stored UTC -> ``YYYY/M/D H:MM`` in JST."""
    if not deadline:
        return ''
    try:
        loc = _stored_to_local(deadline)
    except (ValueError, OverflowError):
        logger.warning("Failed to format deadline %r in slash style", deadline, exc_info=True)
        return deadline
    return f"{loc.year:04d}/{loc.month}/{loc.day} {loc.hour}:{loc.minute:02d}"


def format_kanji(deadline: Optional[str]) -> str:
    """Stored UTC -> ``YYYY年M月D日H時`` (plus ``M分`` when minutes are set)."""
    if not deadline:
        return ''
    try:
        loc = _stored_to_local(deadline)
    except (ValueError, OverflowError):
        logger.warning("Failed to format deadline %r in kanji style", deadline, exc_info=True)
        return deadline
    text = f"{loc.year:04d}年{loc.month}月{loc.day}日{loc.hour}時"
    if loc.minute:
        text += f"{loc.minute}分"
    return text


def format_deadline(deadline: Optional[str], style: str = 'slash') -> str:
    if style == 'kanji':
        return format_kanji(deadline)
    return format_slash(deadline)


@dataclass(frozen=True)
class RemainingTime:
    text: str
    overdue: bool


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def remaining_time(deadline: Optional[str], now: Optional[dt.datetime] = None) -> Optional[RemainingTime]:
    """Bucket the time left until ``deadline`` into days/hours/minutes.

    Thresholds are inclusive floors on whole minutes: 1440 minutes left reads
    as 1 day, 60 minutes as 1 hour. A deadline at or before ``now`` is overdue.
    """
    if not deadline:
        return None
    try:
        target = _parse_stored(deadline)
    except (ValueError, OverflowError):
        logger.warning("Cannot compute remaining time for %r", deadline, exc_info=True)
        return None
    if now is None:
        now = _utc_now()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    diff = target - now
    if diff <= dt.timedelta(0):
        return RemainingTime(OVERDUE_LABEL, True)
    minutes = int(diff.total_seconds() // 60)
    if minutes >= 1440:
        days, rest = divmod(minutes, 1440)
        return RemainingTime(f"残り{days}日{rest // 60}時間", False)
    if minutes >= 60:
        hours, mins = divmod(minutes, 60)
        return RemainingTime(f"残り{hours}時間{mins}分", False)
    return RemainingTime(f"残り{minutes}分", False)


def remaining_time_label(deadline: Optional[str], now: Optional[dt.datetime] = None) -> str:
    rem = remaining_time(deadline, now)
    return rem.text if rem else ''


# -----------------------------
# Picker session
# -----------------------------
PICKER_CLOSED = 'closed'
PICKER_OPEN = 'open'
PICKER_CONFIRMED = 'confirmed'
PICKER_CLEARED = 'cleared'
PICKER_CANCELLED = 'cancelled'

TIME_SLOTS: Tuple[str, ...] = tuple(f"{h:02d}:{m:02d}" for h in range(24) for m in (0, 30))


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def first_weekday(year: int, month: int) -> int:
    """Weekday of day 1, counted from Sunday = 0."""
    return (dt.date(year, month, 1).weekday() + 1) % 7


def calendar_cells(year: int, month: int) -> List[Optional[int]]:
    """Leading blanks up to the weekday of day 1, then every day of the month."""
    cells: List[Optional[int]] = [None] * first_weekday(year, month)
    cells.extend(range(1, days_in_month(year, month) + 1))
    return cells


def compose_slash_text(date: dt.date, time_text: str) -> str:
    """Join a picked day and ``HH:MM`` slot into slash text."""
    hh, mm = time_text.split(':', 1)
    return f"{date.year:04d}/{date.month}/{date.day} {int(hh)}:{mm}"


class PickerSession:
    """Calendar + half-hour slot picker, independent of any UI.

    ``on_emit`` is called once when the session is confirmed (with slash text)
    or cleared (with None). Cancelling emits nothing.
    """

    def __init__(self, on_emit: Optional[Callable[[Optional[str]], None]] = None,
                 clock: Callable[[], dt.datetime] = _utc_now):
        self.on_emit = on_emit
        self.clock = clock
        self.state = PICKER_CLOSED
        self.displayed_year: Optional[int] = None
        self.displayed_month: Optional[int] = None
        self.selected_date: Optional[dt.date] = None
        self.selected_time: Optional[str] = None
        self.result: object = _UNSET

    @property
    def is_open(self) -> bool:
        return self.state == PICKER_OPEN

    def today(self) -> dt.date:
        return LocalDateTime.from_utc(self.clock()).date

    def open(self, seed_text: Optional[str] = None) -> None:
        self.state = PICKER_OPEN
        self.result = _UNSET
        self.selected_date = None
        self.selected_time = None
        seed = parse_deadline(seed_text)
        if seed.ok:
            try:
                loc = _stored_to_local(seed.value)
            except OverflowError:
                loc = None
            if loc is not None:
                self.displayed_year, self.displayed_month = loc.year, loc.month
                self.selected_date = loc.date
                self.selected_time = loc.time_text
                return
        if seed.status != PARSE_EMPTY:
            logger.debug("Picker seed not usable, defaulting to today: %r", seed_text)
        today = self.today()
        self.displayed_year, self.displayed_month = today.year, today.month

    def navigate(self, direction: str) -> None:
        if not self.is_open:
            return
        year, month = self.displayed_year, self.displayed_month
        if direction == 'prev':
            if month == 1:
                year, month = year - 1, 12
            else:
                month -= 1
        elif direction == 'next':
            if month == 12:
                year, month = year + 1, 1
            else:
                month += 1
        else:
            logger.debug("Ignoring unknown picker direction %r", direction)
            return
        self.show_month(year, month)

    def show_month(self, year: int, month: int) -> None:
        """Display ``year``/``month``; months outside the datetime range are ignored."""
        if not self.is_open:
            return
        if not (dt.MINYEAR <= year <= dt.MAXYEAR and 1 <= month <= 12):
            logger.debug("Ignoring out-of-range picker month %r/%r", year, month)
            return
        self.displayed_year, self.displayed_month = year, month

    def days_in_displayed_month(self) -> int:
        return days_in_month(self.displayed_year, self.displayed_month)

    def calendar_cells(self) -> List[Optional[int]]:
        return calendar_cells(self.displayed_year, self.displayed_month)

    def is_selected_day(self, day: int) -> bool:
        """True when ``day`` of the displayed month is the selected date."""
        sel = self.selected_date
        return bool(sel and sel.year == self.displayed_year and sel.month == self.displayed_month and sel.day == day)

    def select_date(self, day: int) -> bool:
        if not self.is_open or not 1 <= day <= self.days_in_displayed_month():
            return False
        self.selected_date = dt.date(self.displayed_year, self.displayed_month, day)
        return True

    def select_time(self, slot: str) -> bool:
        if not self.is_open or slot not in TIME_SLOTS:
            return False
        self.selected_time = slot
        return True

    @property
    def can_confirm(self) -> bool:
        return self.is_open and self.selected_date is not None and self.selected_time is not None

    def display_text(self) -> str:
        if self.selected_date is None or self.selected_time is None:
            return ''
        return compose_slash_text(self.selected_date, self.selected_time)

    def confirm(self) -> bool:
        if not self.can_confirm:
            return False
        text = self.display_text()
        self._finish(PICKER_CONFIRMED)
        self._emit(text)
        return True

    def clear(self) -> bool:
        if not self.is_open:
            return False
        self._finish(PICKER_CLEARED)
        self._emit(None)
        return True

    def cancel(self) -> None:
        if self.is_open:
            self._finish(PICKER_CANCELLED)

    close = cancel

    def _finish(self, state: str) -> None:
        self.state = state
        self.selected_date = None
        self.selected_time = None

    def _emit(self, value: Optional[str]) -> None:
        self.result = value
        if self.on_emit is not None:
            self.on_emit(value)


# -----------------------------
# Terminal picker (fragments + key bindings)
# -----------------------------
BASE_THEME_STYLE: Dict[str, str] = {
    'picker.frame': 'bg:#1c1c1c #f0f0f0',
    'picker.title': 'bold #ffd75f',
    'picker.nav': 'bold #87afff',
    'picker.month': 'bold #87afff',
    'picker.weekday': '#d0d0d0',
    'picker.weekday.sunday': '#ff8787',
    'picker.weekday.saturday': '#87d7ff',
    'picker.day': '#f0f0f0',
    'picker.day.empty': '',
    'picker.day.selected': 'bold #87ff5f',
    'picker.day.cursor': 'reverse bold #ffffaf',
    'picker.label': '#ffd787',
    'picker.time': 'bold #f0f0f0',
    'picker.action': 'bold #5fd7af',
    'picker.action.disabled': '#5f5f5f',
    'picker.preview': '#87d7ff',
    'picker.message': '#ffd787',
    'picker.instructions': '#5fd7af',
}

PICKER_TITLE = 'タスク期限設定'
WEEKDAY_LABELS = ('日', '月', '火', '水', '木', '金', '土')
TIME_PLACEHOLDER = '--:--'
CELL_WIDTH = 4
PICKER_HELP = "h/l day · j/k week · </> month · space pick · +/- time · t today · Enter confirm · x clear · q cancel"


def theme_style(cfg: Config) -> Dict[str, str]:
    merged = dict(BASE_THEME_STYLE)
    merged.update(cfg.theme)
    return merged


def _pad_display(text: str, width: int, align: str = "left") -> str:
    """Pad text to a display width, counting wide glyphs as two cells."""
    pad = max(0, width - get_cwidth(text))
    if align == "center":
        left = pad // 2
        return (" " * left) + text + (" " * (pad - left))
    if align == "right":
        return " " * pad + text
    return text + " " * pad


def new_picker_state(session: PickerSession) -> Dict[str, object]:
    """Cursor starts on the selected day, else today, else day 1."""
    cursor = 1
    if session.selected_date and session.is_selected_day(session.selected_date.day):
        cursor = session.selected_date.day
    else:
        today = session.today()
        if (today.year, today.month) == (session.displayed_year, session.displayed_month):
            cursor = today.day
    return {'cursor_day': cursor, 'message': ''}


def build_calendar_fragments(session: PickerSession, picker_state: Dict[str, object]) -> List[Tuple[str, str]]:
    """Return a list of (style, text) tuples for FormattedTextControl."""
    if not session.is_open:
        return [('class:picker.message', 'Picker closed.')]
    frags: List[Tuple[str, str]] = []
    width = CELL_WIDTH * 7

    frags.append(('class:picker.title', _pad_display(PICKER_TITLE, width, 'center')))
    frags.append(('', '\n'))
    frags.append(('class:picker.nav', ' < '))
    month_label = f"{session.displayed_month}月 {session.displayed_year}"
    frags.append(('class:picker.month', _pad_display(month_label, width - 6, 'center')))
    frags.append(('class:picker.nav', ' > '))
    frags.append(('', '\n'))
    for idx, label in enumerate(WEEKDAY_LABELS):
        style = 'class:picker.weekday'
        if idx == 0:
            style = 'class:picker.weekday.sunday'
        elif idx == 6:
            style = 'class:picker.weekday.saturday'
        frags.append((style, _pad_display(label, CELL_WIDTH, 'center')))
    frags.append(('', '\n'))

    cursor_day = int(picker_state.get('cursor_day') or 0)
    cells = session.calendar_cells()
    for start in range(0, len(cells), 7):
        for day in cells[start:start + 7]:
            if day is None:
                frags.append(('class:picker.day.empty', ' ' * CELL_WIDTH))
                continue
            selected = session.is_selected_day(day)
            label = f"[{day:2d}]" if selected else f" {day:2d} "
            if day == cursor_day:
                style = 'class:picker.day.cursor'
            elif selected:
                style = 'class:picker.day.selected'
            else:
                style = 'class:picker.day'
            frags.append((style, label))
        frags.append(('', '\n'))

    frags.append(('', '\n'))
    frags.append(('class:picker.label', '時間 '))
    frags.append(('class:picker.time', session.selected_time or TIME_PLACEHOLDER))
    frags.append(('', '\n\n'))
    frags.append(('class:picker.action', '[x] Clear'))
    frags.append(('', '  '))
    confirm_style = 'class:picker.action' if session.can_confirm else 'class:picker.action.disabled'
    frags.append((confirm_style, '[Enter] Confirm'))
    frags.append(('', '\n'))
    preview = session.display_text()
    if preview:
        frags.append(('class:picker.preview', f"→ {preview}"))
        frags.append(('', '\n'))
    message = picker_state.get('message')
    if message:
        frags.append(('class:picker.message', str(message)))
        frags.append(('', '\n'))
    frags.append(('class:picker.instructions', PICKER_HELP))
    return frags


def _move_cursor(session: PickerSession, picker_state: Dict[str, object], days: int) -> None:
    dim = session.days_in_displayed_month()
    cursor = max(1, min(int(picker_state.get('cursor_day') or 1), dim))
    try:
        target = dt.date(session.displayed_year, session.displayed_month, cursor) + dt.timedelta(days=days)
    except OverflowError:
        return
    session.show_month(target.year, target.month)
    picker_state['cursor_day'] = target.day


def _clamp_cursor(session: PickerSession, picker_state: Dict[str, object]) -> None:
    cursor = int(picker_state.get('cursor_day') or 1)
    picker_state['cursor_day'] = max(1, min(cursor, session.days_in_displayed_month()))


def _step_slot(current: Optional[str], delta: int) -> str:
    """Next/previous half-hour slot; off-grid times snap to the neighbouring slot."""
    if current is None:
        return TIME_SLOTS[0] if delta > 0 else TIME_SLOTS[-1]
    if current in TIME_SLOTS:
        idx = TIME_SLOTS.index(current)
        return TIME_SLOTS[(idx + delta) % len(TIME_SLOTS)]
    if delta > 0:
        return next((s for s in TIME_SLOTS if s > current), TIME_SLOTS[0])
    return next((s for s in reversed(TIME_SLOTS) if s < current), TIME_SLOTS[-1])


def build_picker_key_bindings(session: PickerSession, picker_state: Dict[str, object],
                              invalidate: Optional[Callable[[], None]] = None) -> KeyBindings:
    kb = KeyBindings()

    def refresh(message: str = '') -> None:
        picker_state['message'] = message
        if invalidate is not None:
            invalidate()

    def cursor_binding(days: int):
        def handler(event):
            _move_cursor(session, picker_state, days)
            refresh()
        return handler

    kb.add('h')(cursor_binding(-1))
    kb.add('left')(cursor_binding(-1))
    kb.add('l')(cursor_binding(1))
    kb.add('right')(cursor_binding(1))
    kb.add('k')(cursor_binding(-7))
    kb.add('up')(cursor_binding(-7))
    kb.add('j')(cursor_binding(7))
    kb.add('down')(cursor_binding(7))

    @kb.add('<')
    @kb.add('pageup')
    def _(event):
        session.navigate('prev')
        _clamp_cursor(session, picker_state)
        refresh()

    @kb.add('>')
    @kb.add('pagedown')
    def _(event):
        session.navigate('next')
        _clamp_cursor(session, picker_state)
        refresh()

    @kb.add('t')
    def _(event):
        today = session.today()
        session.show_month(today.year, today.month)
        picker_state['cursor_day'] = today.day
        refresh()

    @kb.add('space')
    def _(event):
        session.select_date(int(picker_state.get('cursor_day') or 1))
        refresh()

    @kb.add('+')
    @kb.add('=')
    def _(event):
        session.select_time(_step_slot(session.selected_time, 1))
        refresh()

    @kb.add('-')
    def _(event):
        session.select_time(_step_slot(session.selected_time, -1))
        refresh()

    @kb.add('enter')
    def _(event):
        if not session.confirm():
            refresh('Select a day and a time first')
            return
        event.app.exit()

    @kb.add('x')
    def _(event):
        session.clear()
        event.app.exit()

    @kb.add('q')
    @kb.add('escape', eager=True)
    @kb.add('c-c')
    def _(event):
        session.cancel()
        event.app.exit()

    return kb


def build_picker_application(session: PickerSession, picker_state: Dict[str, object], cfg: Config,
                             **app_kwargs) -> Application:
    app: Optional[Application] = None

    def invalidate() -> None:
        if app is not None:
            app.invalidate()

    control = FormattedTextControl(lambda: build_calendar_fragments(session, picker_state), focusable=True)
    body = Frame(Window(content=control, width=CELL_WIDTH * 7 + 2), title=PICKER_TITLE, style='class:picker.frame')
    kb = build_picker_key_bindings(session, picker_state, invalidate)
    app = Application(layout=Layout(HSplit([body])), key_bindings=kb, full_screen=True,
                      style=Style.from_dict(theme_style(cfg)), **app_kwargs)
    return app


def run_picker(seed_text: Optional[str], cfg: Config,
               clock: Callable[[], dt.datetime] = _utc_now) -> PickerSession:
    """Run the full-screen picker and return the finished session.

    Inspect ``session.state`` and ``session.result`` for the outcome.
    """
    session = PickerSession(clock=clock)
    session.open(seed_text)
    picker_state = new_picker_state(session)
    app = build_picker_application(session, picker_state, cfg)
    app.run()
    if session.is_open:
        session.cancel()
    logger.info("Picker finished: %s", session.state)
    return session


# -----------------------------
# CLI
# -----------------------------
def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Task deadline text tools (JST)")
    ap.add_argument("--config", help="Path to YAML config")
    ap.add_argument("--log-level", default=None, help="File log level (DEBUG, INFO, WARNING, ERROR)")
    ap.add_argument("--normalize", metavar="TEXT", help="Print the stored UTC form of deadline TEXT")
    ap.add_argument("--format", metavar="ISO", help="Print a stored deadline as display text")
    ap.add_argument("--style", choices=list(DISPLAY_STYLES), help="Display style for --format (default from config)")
    ap.add_argument("--remaining", metavar="ISO", help="Print the time left until a stored deadline")
    ap.add_argument("--pick", nargs="?", const="", metavar="SEED", help="Open the terminal picker, optionally seeded")
    args = ap.parse_args(argv)

    cfg = load_config(args.config)
    setup_logging(args.log_level or cfg.log_level, cfg.log_path)

    if args.normalize is not None:
        parsed = parse_deadline(args.normalize)
        if parsed.invalid:
            print(f"Unrecognized deadline text: {args.normalize}", file=sys.stderr)
            sys.exit(1)
        print(parsed.value or "")
        return

    if args.format is not None:
        print(format_deadline(args.format, args.style or cfg.display_style))
        return

    if args.remaining is not None:
        print(remaining_time_label(args.remaining))
        return

    if args.pick is not None:
        session = run_picker(args.pick or None, cfg)
        if session.state == PICKER_CONFIRMED:
            canonical = normalize(session.result)
            print(format_deadline(canonical, cfg.display_style))
            print(canonical)
        elif session.state == PICKER_CLEARED:
            print("")
        return

    ap.print_help()


if __name__ == "__main__":
    main()
