"""
Write - Transaction assembly and signing pipeline.

Each module covers one stage:
- args:     normalize action call arguments
- actions:  build single-action fragments (scope + authorization)
- batch:    collect fragments into one atomic transaction
- finalize: fetch context, serialize, sign, submit
- usage:    describe an action's expected arguments
- api:      the public ``WriteApi`` facade
"""
