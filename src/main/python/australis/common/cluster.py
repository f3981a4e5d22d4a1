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

from pystachio import Empty, Struct
from pystachio.composite import Structural

__all__ = ('Cluster',)


class Cluster(dict):
  """An immutable bag of attributes describing where a scheduler and its Mesos masters live.

  Attributes are read directly off the cluster:
    cluster.name
    cluster.scheduler_uri

  Commands that depend on a particular set of attributes declare them as a Cluster.Trait and
  view the cluster through it, which both type-checks the attributes and fills in defaults:

    class LeaderTrait(Cluster.Trait):
      zk = Required(String)
      scheduler_zk_path = Default(String, '/aurora/scheduler')

    cluster = Cluster(name='devcluster', zk='192.168.33.7')
    cluster.with_trait(LeaderTrait).scheduler_zk_path  # '/aurora/scheduler'
  """
  Trait = Struct

  def __init__(self, **kwargs):
    self._traits = ()
    super(Cluster, self).__init__(**kwargs)

  def get_trait(self, trait):
    """Project this cluster onto a Cluster.Trait, dropping attributes outside its schema."""
    if not issubclass(trait, Structural):
      raise TypeError('provided trait must be a Cluster.Trait subclass, got %s' % type(trait))
    return trait(trait._filter_against_schema(self))

  def check_trait(self, trait):
    trait_check = self.get_trait(trait).check()
    if not trait_check.ok():
      raise TypeError(trait_check.message())

  def with_traits(self, *traits):
    """Return a copy of this cluster whose attribute lookups go through the given traits."""
    new_cluster = self.__class__(**self)
    for trait in traits:
      new_cluster.check_trait(trait)
    new_cluster._traits = traits
    return new_cluster

  def with_trait(self, trait):
    return self.with_traits(trait)

  def __setitem__(self, key, value):
    raise TypeError('Clusters are immutable.')

  def __getattr__(self, attribute):
    if attribute.startswith('__'):
      raise AttributeError(attribute)
    for trait in self._traits:
      expressed_trait = self.get_trait(trait)
      if hasattr(expressed_trait, attribute):
        value = getattr(expressed_trait, attribute)()
        return None if value is Empty else value.get()
    try:
      return self[attribute]
    except KeyError:
      raise AttributeError('Cluster %s has no attribute %s' % (self.get('name'), attribute))

  def __copy__(self):
    return self

  def __deepcopy__(self, memo):
    return self
