###############################################################################
#                                                                             #
#    This program is free software: you can redistribute it and/or modify     #
#    it under the terms of the GNU General Public License as published by     #
#    the Free Software Foundation, either version 3 of the License, or        #
#    (at your option) any later version.                                      #
#                                                                             #
#    This program is distributed in the hope that it will be useful,          #
#    but WITHOUT ANY WARRANTY; without even the implied warranty of           #
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the            #
#    GNU General Public License for more details.                             #
#                                                                             #
#    You should have received a copy of the GNU General Public License        #
#    along with this program. If not, see <http://www.gnu.org/licenses/>.     #
#                                                                             #
###############################################################################

__author__ = 'Ben Coltman'
__author_email__ = 'ben.coltman@univie.ac.at'
__copyright__ = 'Copyright 2025'
__credits__ = ['Ben Coltman, Daan Speth']
__description__ = 'Probabilistic species co-occurrence networks from presence/absence data'
__license__ = 'GPL3'
__maintainer__ = 'Ben Coltman, Daan Speth'
__maintainer_email__ = 'daan.speth@univie.ac.at'
__name__ = 'cooccurnet'
__python_requires__ = '>=3.9'
__status__ = 'development'
__title__ = 'cooccurnet'
__url__ = 'https://github.com/bcoltman/cooccurnet'
__version__ = '0.1.0'
