"""Application constants.

Reason strings are user-facing and machine-stable: handlers and tests match
on them verbatim.
"""

# Eligibility / acceptance reasons
REASON_ALREADY_ASSIGNED = "already assigned"
REASON_CONTRACTOR_NOT_AVAILABLE = "contractor not available"
REASON_NO_ORG_RELATIONSHIP = "no active relationship with this organization"
REASON_RESTRICTED_TO_FAVORITES = "restricted to favorites"
REASON_JOB_NOT_FOUND = "job not found"
REASON_ASSIGNED_TO_OTHER = "job is assigned to another contractor"

# Approval policy reasons
REASON_EMERGENCY_OVERRIDE = "emergency override"
REASON_VACATION_RELAX_MODE = "vacation relax-mode"
REASON_TRUSTED_CONTRACTOR = "trusted contractor"
REASON_COST_OVER_REVIEW = "cost exceeds review threshold"
REASON_UNDER_COST_LIMIT = "under auto-approve cost limit"
REASON_WEEKDAY_WINDOW = "auto-approved weekday window"
REASON_WEEKEND_WINDOW = "auto-approved weekend window"
REASON_EVENING_WINDOW = "auto-approved evening window"
REASON_NO_RULE_MATCHED = "no auto-approval rule matched"
REASON_NO_ACTIVE_POLICY = "no active approval policy"

# Proposal negotiation reasons
REASON_PROPOSAL_EXPIRED = "proposal expired"
REASON_PROPOSAL_NOT_FOUND = "proposal not found"
REASON_SLOT_NOT_FOUND = "slot not found"
REASON_PROPOSAL_NOT_PENDING = "proposal is no longer pending"

# Per-slot conflict annotations
CONFLICT_BLACKOUT = "contractor blackout"
CONFLICT_OUTSIDE_AVAILABILITY = "outside contractor availability"
