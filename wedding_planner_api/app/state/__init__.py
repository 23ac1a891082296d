"""
Local state objects.

These modules hold the in-process counterparts of the dashboard's
interactive state: orderable collections and the reorder planner, the
optimistic update helper, the drag state machine, slide navigation and
preferences.  None of them perform I/O except through callables passed
in by the services.
"""
