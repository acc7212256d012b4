"""
Services module for business logic.

Modules:
- format_rules: format catalogue, group sizing and config validation
- round_robin: circle-method rounds and their completeness check
- slot_allocator: date, kickoff time and venue assignment
- knockout_builder: one elimination round from an advancing list
- fixture_orchestrator: generate() / run_generation() / generate_knockout_round()
- fixture_invariants: post-allocation verification
- capacity_estimate: feasibility preview
"""
