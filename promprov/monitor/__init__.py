"""promprov terminal output.

Modules
-------
renderer
    ``PlanRenderer`` turns ``ProvisioningPlan`` and ``RunReport`` models
    into Rich renderables for terminal display.
"""
