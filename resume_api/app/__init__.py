"""This package contains the resume aggregation service.

It serves a single authenticated endpoint that returns every resume and its
child records (educations, work experiences, computer skills, skills,
languages and awards) as one JSON document.

Notes:
    1. app.core: settings, token verification, the request gate and exceptions.
    2. app.database: the pooled engine and the query executor.
    3. app.api: the aggregation route and its query logic.
    4. app.main: the application factory, lifespan and server entry point.

"""
