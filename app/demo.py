"""
No-guess Minesweeper - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Dict, FrozenSet, Optional, Sequence, Set

from noguess import (
    PRESETS,
    Grid,
    LayoutUnreachable,
    Rule,
    generate_layout_report,
    verify_layout,
)

COLORS: Dict[str, str] = {
    "0": "#cccccc",
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
    ".": "#666666",  # Dark dot for unrevealed
    "F": "#ffffff",  # White text on orange background
}

RULE_LABELS: Dict[str, str] = {
    Rule.SINGLE_CANDIDATE.value: "Single candidate",
    Rule.ZERO_REMAINING.value: "Zero remaining",
    Rule.UNIVERSAL_MEMBERSHIP.value: "Universal membership",
    Rule.UNIVERSAL_ABSENCE.value: "Universal absence",
    Rule.ENDGAME_FALLBACK.value: "Endgame fallback",
}


def render_board_from_snapshot(
    snapshot: Sequence[str],
    size: int,
    mines: FrozenSet[int] = frozenset(),
    highlight: Optional[Set[int]] = None,
    show_mines: bool = False,
) -> str:
    """Render a board from a visible-state snapshot as an HTML table."""
    # Scale cell size based on board size
    if size >= 16:
        cell_size = 20
        font_size = "13px"
    else:
        cell_size = 26
        font_size = "15px"

    highlight = highlight or set()

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for row in range(size):
        html += "<tr>"
        for col in range(size):
            i = row * size + col
            value = snapshot[i]

            if value == "F":
                cell = "F"
                bg = "#ffa500"
                text_color = COLORS["F"]
            elif value == ".":
                if show_mines and i in mines:
                    cell = "M"
                    bg = "#ffcccc"
                    text_color = "#ff0000"
                else:
                    cell = "."
                    bg = "#c0c0c0"
                    text_color = COLORS["."]
            else:
                cell = value
                bg = "#f0f0f0" if cell == "0" else "#ffffff"
                text_color = COLORS.get(cell, "#000000")

            border = "2px solid #ff0000" if i in highlight else "1px solid #999"
            display = cell if cell != "0" else " "

            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def main():
    st.set_page_config(
        page_title="No-guess Minesweeper",
        page_icon="💣",
        layout="wide",
    )

    st.title("No-guess Minesweeper")
    st.markdown("""
    Boards generated so that every mine can be located by deduction from the first cell.
    """)

    # Sidebar configuration
    st.sidebar.header("Board Configuration")

    preset = st.sidebar.selectbox(
        "Preset",
        [f"{name.title()} ({s}x{s}, 1/{d})" for name, (s, d) in PRESETS.items()] + ["Custom"],
    )

    if preset == "Custom":
        size = st.sidebar.slider("Size", 4, 20, 10)
        divisor = st.sidebar.slider("Mine divisor", 3, 12, 6)
    else:
        name = preset.split(" ")[0].lower()
        size, divisor = PRESETS[name]

    first_row = st.sidebar.number_input("First cell row", 0, size - 1, size // 2)
    first_col = st.sidebar.number_input("First cell column", 0, size - 1, size // 2)
    max_attempts = st.sidebar.number_input("Max attempts", 1, 100000, 10000)
    exclude_id = int(first_row) * size + int(first_col)

    if "report" not in st.session_state:
        st.session_state.report = None
        st.session_state.engine = None
        st.session_state.error = None
        st.session_state.current_step = 0

    col1, col2 = st.columns([2, 1])

    with col1:
        st.subheader("Trial Board")

        if st.button("Generate Layout", type="primary"):
            try:
                report = generate_layout_report(
                    size, divisor, exclude_id, max_attempts=int(max_attempts)
                )
            except LayoutUnreachable as exc:
                st.session_state.report = None
                st.session_state.engine = None
                st.session_state.error = str(exc)
            else:
                st.session_state.report = report
                st.session_state.engine = verify_layout(
                    size, divisor, report.layout, exclude_id, record_steps=True
                )
                st.session_state.error = None
                st.session_state.exclude_id = exclude_id
                st.session_state.current_step = len(st.session_state.engine.history)
            st.rerun()

        if st.session_state.error:
            st.error(st.session_state.error)

        engine = st.session_state.engine
        report = st.session_state.report

        if engine is not None and engine.grid.size == size:
            exclude_id = st.session_state.exclude_id
            first_row, first_col = divmod(exclude_id, size)
            history = engine.history
            total_steps = len(history)

            if total_steps:
                step_display = st.slider(
                    "Deduction step", 0, total_steps, st.session_state.current_step
                )
                st.session_state.current_step = step_display
            else:
                step_display = 0

            if step_display == 0:
                opening = Grid(size, engine.grid.mine_divisor)
                opening.assign_mines(report.layout)
                opening.reveal(exclude_id)
                snapshot = opening.snapshot()
                highlight: Set[int] = {exclude_id}
                st.info(f"Opening move at cell ({first_row}, {first_col})")
            else:
                deduction = history[step_display - 1]
                snapshot = list(deduction.snapshot or engine.grid.snapshot())
                highlight = set(deduction.flagged) | set(deduction.revealed)
                if deduction.source is not None:
                    highlight.add(deduction.source)
                label = RULE_LABELS[deduction.rule.value]
                st.info(f"**Step {step_display}/{total_steps}**: *{label}*")

            html = render_board_from_snapshot(
                snapshot,
                size,
                mines=report.layout,
                highlight=highlight,
                show_mines=step_display == total_steps,
            )
            st.markdown(html, unsafe_allow_html=True)
        else:
            st.info("Click 'Generate Layout' to search for a no-guess board.")

    with col2:
        st.subheader("Generation Statistics")

        if report is not None:
            st.metric("Attempts", report.attempts)
            st.metric("Time", f"{report.elapsed:.3f}s")
            st.metric("Mines", len(report.layout))
            st.text(f"Sampled mines: {report.sampled_mines}")
            st.text(f"Endgame fallback: {'yes' if report.fallback_used else 'no'}")

            st.markdown("---")
            st.markdown("**Deductions by rule**")
            for rule, count in report.rule_counts.items():
                st.text(f"{RULE_LABELS[rule]}: {count}")
        else:
            st.info("Generate a layout to see statistics.")

        st.markdown("---")
        st.subheader("Algorithm Info")
        st.markdown("""
        **Deduction rules:**
        1. **Single candidate**: only one arrangement fits, flag it
        2. **Zero remaining**: all mines flagged, reveal the rest
        3. **Universal membership**: mined in every arrangement, flag it
        4. **Universal absence**: mined in no arrangement, reveal it
        """)


if __name__ == "__main__":
    main()
