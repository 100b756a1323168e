"""Exam study planner: Leitner review queue, daily plans and focus timer."""
