"""
LexiBridge - translation merge engine
Decides whether a proposed translation joins an existing concept group
"""
