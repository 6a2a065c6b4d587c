"""srsglass -- NationStates region update timesheets."""

__version__ = "0.5.0"
