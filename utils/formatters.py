"""
Display formatting shared by every exporter
Values are formatted here and never recomputed by the exporters themselves
"""

from ranking.ranker import ZSCORE

UNKNOWN_DISPLAY = '-'


def format_number(value):
    """Format number: whole numbers without decimals, fractional numbers with 2 decimal places."""
    try:
        if value is None:
            return None
        num = float(value)
        if num == int(num):
            return int(num)  # 32.0 -> 32
        else:
            return round(num, 2)  # 32.43 -> 32.43
    except (ValueError, TypeError):
        return value


def format_fixed(value, places=2):
    """Fixed decimal text, e.g. 80 -> '80.00'"""
    if value is None:
        return UNKNOWN_DISPLAY
    return f"{float(value):.{places}f}"


def format_z_score(z_score):
    """Z-score text to 2 places; the -20 sentinel renders as '-20.00'"""
    return format_fixed(z_score)


def format_cell(cell):
    """Display form of a MarkCell: the mark, 'AB' or '-'"""
    display = cell.display_value
    if cell.is_numeric:
        return format_number(display)
    return display


def format_attendance(value, places=None):
    """Attendance field; unknown stays visibly unknown, never 0"""
    if value is None:
        return UNKNOWN_DISPLAY
    if places is None:
        return format_number(value)
    return format_fixed(value, places)


def report_headers(result):
    """Column headers for a ranked mark sheet"""
    headers = ['No.', 'Index Number', 'Name', 'Class']
    headers.extend(subject.code or subject.name for subject in result.subjects)
    headers.extend(['Total', 'Average'])
    if result.ranking_method == ZSCORE:
        headers.append('Z-Score')
    headers.extend(['Rank', 'Absent Days', 'Attendance %'])
    return headers


def report_row(position, row, result):
    """Display values for one ranked row, aligned with report_headers"""
    values = [position, row.index_number, row.name, row.current_class]
    values.extend(format_cell(cell) for _, cell in row.ordered_cells())
    values.extend([format_number(row.total_marks), format_fixed(row.average)])
    if result.ranking_method == ZSCORE:
        values.append(format_z_score(row.z_score))
    values.extend([
        row.rank,
        format_attendance(row.absent_days),
        format_attendance(row.attendance_percentage, places=2),
    ])
    return values
