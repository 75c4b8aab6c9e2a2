"""
Built-in resort list.

Served whenever the POI directory is unreachable or returns nothing,
so the weather page always has something to show.
"""

from .models import SkiResort


DEFAULT_SKI_RESORTS: tuple[SkiResort, ...] = (
    SkiResort(
        id="B000A9WZYZ",
        name="北京南山滑雪场",
        address="河南寨镇圣水头村",
        location="116.862291,40.330682",
        rating=4.7,
        tel="010-84411182",
        cityname="北京市",
        adname="密云区",
        photo_url="http://aos-cdn-image.amap.com/sns/ugccomment/3536b704-a109-4932-b1cd-034bd594dc93.jpg",
    ),
    SkiResort(
        id="B000A7PQ9P",
        name="北京军都山滑雪场",
        address="崔村镇真顺村588号",
        location="116.331248,40.239676",
        rating=4.6,
        tel="010-60725888",
        cityname="北京市",
        adname="昌平区",
        photo_url="http://store.is.autonavi.com/showpic/afeffb36fcc6b0b110828a07c0dfd2b2",
    ),
    SkiResort(
        id="B000A7ZMPK",
        name="北京渔阳国际滑雪场",
        address="东高村镇大旺务村东688号",
        location="117.147716,40.077197",
        rating=4.5,
        tel="010-69908282",
        cityname="北京市",
        adname="平谷区",
        photo_url="http://store.is.autonavi.com/showpic/ae59fd776e05f7038024d276e49ff1c4",
    ),
    SkiResort(
        id="B0HKOUL9IC",
        name="国家高山滑雪中心",
        address="延庆区海坨山",
        location="115.810122,40.550457",
        rating=4.5,
        tel="010-69119500",
        cityname="北京市",
        adname="延庆区",
        photo_url="http://store.is.autonavi.com/showpic/f012c9a2309e8ec2dfed8da02dad7e80",
    ),
    SkiResort(
        id="B000A7Q5WI",
        name="北京乔波滑雪馆",
        address="顺安路6号",
        location="116.661514,40.200128",
        rating=4.5,
        tel="010-60413499",
        cityname="北京市",
        adname="顺义区",
        photo_url="http://store.is.autonavi.com/showpic/03c5bfc20abd5e93204ffff742dd076e",
    ),
    SkiResort(
        id="B000A04209",
        name="北京怀北国际滑雪场",
        address="怀北镇河防口村548号",
        location="116.656299,40.447449",
        rating=4.5,
        tel="010-60687328",
        cityname="北京市",
        adname="怀柔区",
        photo_url="http://store.is.autonavi.com/showpic/2f81c227e06611f29d82a04dbae6cc1a",
    ),
)
