"""
Rolling updates for replicated databases whose replicas hold consensus
roles (leader, followers, learner).

The update orders replica replacement by role so the leader goes last,
keeps the component's persisted consensus status in step with the roles
replicas report, and pushes leader and follower identities to the
component's config records.
"""

__version__ = "0.1.0"
