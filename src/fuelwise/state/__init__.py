"""State layer.

Every external event (user input, adapter response, timer) is converted
into one of the events in :mod:`fuelwise.state.events` and applied by
:class:`fuelwise.state.store.StateStore`, which is the only component
allowed to replace the application state.
"""
