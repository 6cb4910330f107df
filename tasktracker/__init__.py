# flake8: noqa
"""
Minimal task tracker: REST backend plus a single-page UI.

Modules:
    settings:   Configuration file loading and environment overrides.
    store:      In-memory, insertion-ordered task store and its errors.
    client:     Requests-based client for the task API.
    controller: Client-side view state and user actions for the task list.
    templates:  HTML and script for the single-page interface.
    main:       FastAPI application wiring everything together.
"""
