"""Staff attendance reporting package.

Staff walk through a fixed daily sequence of check-ins (previous-day plan,
wake-up, departure, arrival, daily report); managers watch progress, approve
shift schedules and review history. Organized by feature modules with a thin
Flask controller layer over service/repository layers.
"""

__version__ = "1.0.0"
