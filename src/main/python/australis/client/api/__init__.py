#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

"""Call-through adapter between the command line and an Aurora scheduler client.

The scheduler RPC client itself is supplied from outside this package; anything implementing
SchedulerClient can be plugged in (see australis.client.factory).
"""

import logging
from abc import ABCMeta, abstractmethod
from collections import namedtuple

log = logging.getLogger(__name__)


class ScheduleStatus(object):
  INIT = 'INIT'
  THROTTLED = 'THROTTLED'
  PENDING = 'PENDING'
  ASSIGNED = 'ASSIGNED'
  STARTING = 'STARTING'
  RUNNING = 'RUNNING'
  FINISHED = 'FINISHED'
  PREEMPTING = 'PREEMPTING'
  RESTARTING = 'RESTARTING'
  DRAINING = 'DRAINING'
  FAILED = 'FAILED'
  KILLED = 'KILLED'
  KILLING = 'KILLING'
  LOST = 'LOST'


LIVE_STATES = frozenset([
    ScheduleStatus.KILLING,
    ScheduleStatus.PREEMPTING,
    ScheduleStatus.RESTARTING,
    ScheduleStatus.DRAINING,
    ScheduleStatus.RUNNING])


# Numeric values of the scheduler's MaintenanceMode enum.
MAINTENANCE_MODES = {
  1: 'NONE',
  2: 'SCHEDULED',
  3: 'DRAINING',
  4: 'DRAINED',
}


class HostStatus(namedtuple('HostStatus', ['host', 'mode'])):
  """Maintenance state of a single agent host."""

  @classmethod
  def from_status(cls, status):
    if isinstance(status, (tuple, list)):
      host, mode = status
    else:
      host, mode = status.host, status.mode
    return cls(host, MAINTENANCE_MODES.get(mode, mode))

  def __str__(self):
    return '%s:%s' % (self.host, self.mode)


class TaskQuery(object):
  """Filter for task queries. A field left as None matches every task."""

  def __init__(self, environment=None, role=None, job_name=None, statuses=None):
    self.environment = environment
    self.role = role
    self.job_name = job_name
    self.statuses = frozenset(statuses) if statuses is not None else None

  def to_dict(self):
    fields = (('environment', self.environment),
              ('role', self.role),
              ('jobName', self.job_name),
              ('statuses', sorted(self.statuses) if self.statuses is not None else None))
    return dict((name, value) for name, value in fields if value is not None)

  def __eq__(self, other):
    return isinstance(other, TaskQuery) and self.to_dict() == other.to_dict()

  def __ne__(self, other):
    return not self == other

  def __hash__(self):
    return hash(tuple(sorted((k, str(v)) for k, v in self.to_dict().items())))

  def __repr__(self):
    return 'TaskQuery(%s)' % ', '.join('%s=%r' % item for item in sorted(self.to_dict().items()))


def build_query(environment='', role='', name='', statuses=None):
  """Build a TaskQuery from raw flag values.

  Empty strings mean "no constraint" and never end up in the query, so the scheduler does
  not try to match them literally.
  """
  return TaskQuery(
      environment=environment or None,
      role=role or None,
      job_name=name or None,
      statuses=statuses)


class SchedulerClient(metaclass=ABCMeta):
  """The operations australis needs from a scheduler client."""

  @abstractmethod
  def get_tasks_without_configs(self, query):
    """Return the tasks matching a TaskQuery, without their full task configs."""

  @abstractmethod
  def get_task_status(self, query):
    """Return the status of the tasks matching a TaskQuery."""

  @abstractmethod
  def get_jobs(self, role):
    """Return the job configurations owned by role, or by every role if role is None."""

  @abstractmethod
  def maintenance_status(self, hosts):
    """Return (host, mode) entries for the given host names."""


class SchedulerAPI(object):
  """Thin call-through to a SchedulerClient.

  Every failure of the underlying client surfaces as SchedulerAPI.Error so callers only need
  to handle one exception type. Nothing is retried.
  """

  class Error(Exception): pass

  def __init__(self, client, cluster_name=None):
    if not isinstance(client, SchedulerClient):
      raise TypeError('SchedulerAPI expects a SchedulerClient, got %s' % type(client))
    self._client = client
    self._cluster_name = cluster_name

  @property
  def cluster_name(self):
    return self._cluster_name

  def _call(self, method_name, *args):
    try:
      return getattr(self._client, method_name)(*args)
    except Exception as e:
      raise self.Error('Error during %s to %s: %s' % (
          method_name, self._cluster_name or 'scheduler', e))

  def get_tasks_without_configs(self, query):
    log.debug('Querying tasks without configs: %r' % query)
    return list(self._call('get_tasks_without_configs', query) or [])

  def get_task_status(self, query):
    log.debug('Querying task status: %r' % query)
    return list(self._call('get_task_status', query) or [])

  def get_jobs(self, role):
    log.debug('Querying jobs for role: %s' % (role or '<all roles>'))
    return list(self._call('get_jobs', role) or [])

  def maintenance_status(self, hosts):
    log.debug('Querying maintenance status for: %s' % ', '.join(hosts))
    statuses = self._call('maintenance_status', list(hosts)) or []
    return [HostStatus.from_status(status) for status in statuses]
