"""
Sorting helper utilities for the school results system
Provides consistent ordering for students before ranking
"""

import re


class SortingHelpers:
    """Helper class for sorting operations"""

    @staticmethod
    def get_student_sort_key(student):
        """
        Sort key for a student: class first, then the numeric part of the
        index number, then the raw index number
        """
        current_class = (student.current_class or '').upper()
        index_number = (student.index_number or '').upper()

        numeric_match = re.search(r'(\d+)', index_number)
        if numeric_match:
            numeric_part = int(numeric_match.group(1))
        else:
            numeric_part = 999999  # Put non-numeric at end

        return (current_class, numeric_part, index_number)

    @staticmethod
    def sort_students(students):
        """Sort students using the standard sorting logic"""
        return sorted(students, key=SortingHelpers.get_student_sort_key)
