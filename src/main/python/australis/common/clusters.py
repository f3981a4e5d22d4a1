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

import itertools
import json
import os
from collections import namedtuple
from collections.abc import Mapping
from contextlib import contextmanager

import yaml
from pystachio import Default, Integer, Required, String

from .cluster import Cluster

__all__ = (
  'CLUSTERS',
  'Clusters',
  'SchedulerClientTrait',
)


class NameTrait(Cluster.Trait):
  name = Required(String)


class SchedulerClientTrait(Cluster.Trait):
  zk                = String  # noqa
  zk_port           = Default(Integer, 2181)  # noqa
  scheduler_zk_path = Default(String, '/aurora/scheduler')  # noqa
  scheduler_uri     = String  # noqa
  scheduler_client  = Default(String, 'aurora')  # noqa


Parser = namedtuple('Parser', 'loader exception')


class Clusters(Mapping):
  class Error(Exception): pass
  class ClusterNotFound(KeyError, Error): pass
  class UnknownFormatError(Error): pass
  class ParseError(Error): pass

  LOADERS = {
    '.json': Parser(json.load, ValueError),
    '.yml': Parser(yaml.safe_load, yaml.YAMLError),
  }

  @classmethod
  def from_file(cls, filename):
    return cls(list(cls.iter_clusters(filename)))

  @classmethod
  def iter_clusters(cls, filename):
    _, ext = os.path.splitext(filename)
    if ext not in cls.LOADERS:
      raise cls.UnknownFormatError('Unknown clusters file extension: %r' % ext)
    with open(filename) as fp:
      loader, exc_type = cls.LOADERS[ext]
      try:
        document = loader(fp)
      except exc_type as e:
        raise cls.ParseError('Unable to parse %s: %s' % (filename, e))
    if isinstance(document, list):
      iterator = document
    elif isinstance(document, dict):
      iterator = document.values()
    else:
      raise cls.ParseError('Unknown layout in %s' % filename)
    for entry in iterator:
      if not isinstance(entry, dict):
        raise cls.ParseError('Clusters must be maps of key/value pairs, got %s' % type(entry))
      # entries without a name are ignored.
      if 'name' not in entry:
        continue
      yield Cluster(**entry)

  def __init__(self, cluster_list):
    self.replace(cluster_list)

  def replace(self, cluster_list):
    self._clusters = {}
    self.update(cluster_list)

  def update(self, cluster_list):
    for cluster in cluster_list:
      if not isinstance(cluster, Cluster):
        raise TypeError('Expected a Cluster, got %s' % type(cluster))
      self.add(cluster)

  def add(self, cluster):
    cluster = Cluster(**cluster)
    cluster.check_trait(NameTrait)
    self._clusters[cluster.name] = cluster

  @contextmanager
  def patch(self, cluster_list):
    """Temporarily replace the known clusters, for tests."""
    old_clusters = self._clusters.copy()
    self.replace(cluster_list)
    try:
      yield self
    finally:
      self._clusters = old_clusters

  def __iter__(self):
    return iter(self._clusters)

  def __len__(self):
    return len(self._clusters)

  def __getitem__(self, name):
    try:
      return self._clusters[name]
    except KeyError:
      raise self.ClusterNotFound('Unknown cluster %s, valid clusters: %s' % (
          name, ', '.join(sorted(self._clusters))))


DEFAULT_SEARCH_PATHS = (
  os.environ.get('AURORA_CONFIG_ROOT') or '/etc/aurora',
  os.path.expanduser('~/.aurora')
)


CLUSTERS = Clusters(())


def load(search_paths=DEFAULT_SEARCH_PATHS, clusters=CLUSTERS):
  """(Re-)load clusters from the search path; later paths override earlier ones."""
  for search_path, ext in itertools.product(search_paths, sorted(Clusters.LOADERS)):
    filename = os.path.join(search_path, 'clusters' + ext)
    if os.path.exists(filename):
      clusters.update(Clusters.from_file(filename).values())


load()
